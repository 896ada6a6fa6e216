"""
Declarative column tables for NPPES files.

A ``RecordSchema`` is an ordered tuple of ``ColumnSpec`` plus a builder
that assembles converted field values into a record. Repeated column
families (taxonomy slots, other identifier slots) are generated from a
``RepeatedGroup`` and collapsed into ordered lists by the row parser.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from nppes.errors import SchemaMismatchError

R = TypeVar("R")

# Converted values of one row: field name -> value, group name -> list of slot dicts.
RowValues = dict[str, Any]


class FieldKind(str, Enum):
    """Semantic type of a column."""

    TEXT = "text"  # Trimmed string, empty -> None
    CODE = "code"  # Enumerated code looked up in ColumnSpec.codes
    DATE = "date"  # MM/DD/YYYY
    NPI = "npi"  # Checksum-validated identifier
    FLAG = "flag"  # Y/N/X answer


@dataclass(frozen=True, slots=True)
class ColumnSpec:
    """
    One column of a file.

    Attributes:
        name: Exact header text.
        field: Target field name in the converted row values.
        kind: Semantic type used for conversion.
        required: Whether an empty value is a row failure.
        codes: Accepted codes (upper-cased) for CODE columns.
        group: Name of the repeated group this column belongs to.
        slot: 1-based slot number within the group.
    """

    name: str
    field: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    codes: Mapping[str, Any] | None = None
    group: str | None = None
    slot: int | None = None


@dataclass(frozen=True, slots=True)
class GroupMember:
    """Column template within a repeated group; ``{i}`` is the slot number."""

    template: str
    field: str
    kind: FieldKind = FieldKind.TEXT
    codes: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class RepeatedGroup:
    """
    N parallel column families collapsed into one ordered list.

    Slots whose ``key`` field is empty are skipped.
    """

    name: str
    count: int
    key: str
    members: tuple[GroupMember, ...]

    def columns(self, *fields: str) -> tuple[ColumnSpec, ...]:
        """
        Generate column specs slot by slot.

        Args:
            fields: Members to include (all members if none given).

        Returns:
            Columns ordered slot-major, members in declaration order.
        """
        members = [m for m in self.members if not fields or m.field in fields]
        return tuple(
            ColumnSpec(
                name=member.template.format(i=i),
                field=member.field,
                kind=member.kind,
                codes=member.codes,
                group=self.name,
                slot=i,
            )
            for i in range(1, self.count + 1)
            for member in members
        )


@dataclass(frozen=True)
class RecordSchema(Generic[R]):
    """
    Versioned column table for one file type.

    Attributes:
        name: Schema identifier.
        version: Schema version.
        columns: Columns in canonical header order.
        build: Assembles converted row values into a record.
        groups: Repeated groups referenced by the columns.
    """

    name: str
    version: str
    columns: tuple[ColumnSpec, ...]
    build: Callable[[RowValues], R]
    groups: tuple[RepeatedGroup, ...] = field(default=())

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for column in self.columns:
            if column.name in seen:
                msg = f"Schema {self.name} declares column {column.name!r} twice"
                raise ValueError(msg)
            seen.add(column.name)

    @property
    def header(self) -> tuple[str, ...]:
        """Canonical header sequence."""
        return tuple(column.name for column in self.columns)

    @property
    def width(self) -> int:
        return len(self.columns)

    def column(self, name: str) -> ColumnSpec:
        """Look up a column by header text."""
        for column in self.columns:
            if column.name == name:
                return column
        msg = f"Schema {self.name} has no column {name!r}"
        raise KeyError(msg)

    def validate_header(self, observed: Sequence[str]) -> None:
        """
        Compare an observed header against the canonical one.

        Names must match exactly; only a UTF-8 byte order mark in front of
        the first column is removed.

        Args:
            observed: Header fields as read from the file.

        Raises:
            SchemaMismatchError: If any column differs or the count differs.
        """
        cleaned = list(observed)
        if cleaned and cleaned[0].startswith("\ufeff"):
            cleaned[0] = cleaned[0][1:]
        if tuple(cleaned) != self.header:
            raise SchemaMismatchError(self.name, self.header, cleaned)
