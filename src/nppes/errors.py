"""
Typed error hierarchy for NPPES ingestion, store construction and queries.

Every error carries enough context (file, row, column, value) to diagnose
the problem without re-reading the source file.
"""

from collections.abc import Sequence
from enum import Enum
from pathlib import Path


class ValidationRule(str, Enum):
    """Rule violated by a single field or row."""

    TYPE_MISMATCH = "type_mismatch"
    CHECKSUM = "checksum"
    INVALID_CODE = "invalid_code"
    MALFORMED_DATE = "malformed_date"
    MISSING_REQUIRED = "missing_required"
    FIELD_COUNT = "field_count"
    MALFORMED_ROW = "malformed_row"
    INVARIANT = "invariant"


class NppesError(Exception):
    """Base class for all errors raised by the nppes package."""


class ConfigurationError(NppesError, ValueError):
    """Invalid or incomplete configuration."""


class NppesFileNotFoundError(NppesError, FileNotFoundError):
    """A data file does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        name = path.name.lower()
        if name.startswith("npidata"):
            hint = "main NPPES files are named 'npidata_pfile_YYYYMMDD-YYYYMMDD.csv'"
        elif "taxonomy" in name:
            hint = "the NUCC taxonomy file is named 'nucc_taxonomy_NNN.csv'"
        else:
            hint = "check the path and read permissions"
        super().__init__(f"Data file not found: {path} ({hint})")


class NppesIOError(NppesError, OSError):
    """A data file exists but could not be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"I/O error reading {path}: {reason}")


class SchemaMismatchError(NppesError):
    """Observed header does not match the canonical header of a schema."""

    def __init__(
        self,
        schema: str,
        expected: Sequence[str],
        observed: Sequence[str],
    ) -> None:
        self.schema = schema
        self.expected = tuple(expected)
        self.observed = tuple(observed)
        self.position = _first_difference(self.expected, self.observed)

        if self.position is None:
            detail = "headers are identical"
        elif self.position < min(len(self.expected), len(self.observed)):
            detail = (
                f"column {self.position}: expected {self.expected[self.position]!r}, "
                f"found {self.observed[self.position]!r}"
            )
        else:
            detail = f"expected {len(self.expected)} columns, found {len(self.observed)}"
        super().__init__(f"Schema mismatch for {schema}: {detail}")


class DataValidationError(NppesError, ValueError):
    """A single value failed validation."""

    def __init__(
        self,
        field: str,
        reason: str,
        rule: ValidationRule,
        value: str | None = None,
    ) -> None:
        self.field = field
        self.reason = reason
        self.rule = rule
        self.value = value
        super().__init__(f"{field}: {reason}")


class RowParseError(NppesError):
    """A data row could not be converted into a record."""

    def __init__(
        self,
        row: int,
        column: str | None,
        raw_value: str | None,
        rule: ValidationRule,
        reason: str = "",
    ) -> None:
        self.row = row
        self.column = column
        self.raw_value = raw_value
        self.rule = rule
        self.reason = reason

        where = f"row {row}" if column is None else f"row {row}, column {column!r}"
        msg = f"{where}: {rule.value}"
        if reason:
            msg = f"{msg} ({reason})"
        if raw_value is not None:
            msg = f"{msg}, value={raw_value[:80]!r}"
        super().__init__(msg)


class DuplicateIdentifierError(NppesError):
    """The same key occurs more than once where keys must be unique."""

    def __init__(self, identifier: str, kind: str = "NPI") -> None:
        self.identifier = identifier
        self.kind = kind
        super().__init__(f"Duplicate {kind} {identifier!r}")


def _first_difference(expected: Sequence[str], observed: Sequence[str]) -> int | None:
    for i, (left, right) in enumerate(zip(expected, observed)):
        if left != right:
            return i
    if len(expected) != len(observed):
        return min(len(expected), len(observed))
    return None
