"""
Conversion of tokenized rows into typed records.

Everything here is pure: no I/O and no shared state, so batches can be
parsed concurrently.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Generic, TypeVar

from nppes.errors import DataValidationError, RowParseError, ValidationRule
from nppes.ingestion.reader import RawRow
from nppes.models.identifiers import YES_NO_CODES, Npi
from nppes.schemas.columns import ColumnSpec, FieldKind, RecordSchema, RowValues

R = TypeVar("R")

DATE_FORMAT = "%m/%d/%Y"
_DATE_PATTERN = re.compile(r"\d{2}/\d{2}/\d{4}")


def parse_date(value: str, column: str = "date") -> date:
    """
    Parse a MM/DD/YYYY date.

    Args:
        value: Non-empty, trimmed date text.
        column: Column name used in the error.

    Returns:
        The parsed date.

    Raises:
        DataValidationError: If the text is not a valid MM/DD/YYYY date.
    """
    if not _DATE_PATTERN.fullmatch(value):
        raise DataValidationError(
            column, "expected MM/DD/YYYY", ValidationRule.MALFORMED_DATE, value
        )
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as e:
        raise DataValidationError(
            column, str(e), ValidationRule.MALFORMED_DATE, value
        ) from e


def convert_value(column: ColumnSpec, raw: str) -> Any:
    """
    Convert one raw field according to its column spec.

    Empty text converts to None, or fails if the column is required.

    Raises:
        DataValidationError: If the value violates the column's rule.
    """
    value = raw.strip()
    if not value:
        if column.required:
            raise DataValidationError(
                column.name, "required value is empty", ValidationRule.MISSING_REQUIRED, raw
            )
        return None

    kind = column.kind
    if kind is FieldKind.TEXT:
        return value
    if kind is FieldKind.NPI:
        return Npi(value)
    if kind is FieldKind.DATE:
        return parse_date(value, column.name)

    codes = YES_NO_CODES if kind is FieldKind.FLAG else column.codes
    if codes is None:
        msg = f"Column {column.name!r} is a code column without a code table"
        raise TypeError(msg)
    try:
        return codes[value.upper()]
    except KeyError:
        valid = ", ".join(sorted(codes))
        raise DataValidationError(
            column.name,
            f"invalid code (valid: {valid})",
            ValidationRule.INVALID_CODE,
            value,
        ) from None


def parse_row(schema: RecordSchema[R], fields: Sequence[str], row_number: int) -> R:
    """
    Convert one tokenized row into a record.

    Args:
        schema: Column table of the file.
        fields: Raw field values in header order.
        row_number: Data row number, used in errors.

    Returns:
        The record built by the schema.

    Raises:
        RowParseError: If the field count is wrong, a value fails its
            column rule or the assembled row violates a record invariant.
    """
    if len(fields) != schema.width:
        raise RowParseError(
            row_number,
            None,
            ",".join(fields),
            ValidationRule.FIELD_COUNT,
            f"expected {schema.width} fields, found {len(fields)}",
        )

    values: RowValues = {}
    slots: dict[str, dict[int, RowValues]] = {}
    for column, raw in zip(schema.columns, fields):
        try:
            value = convert_value(column, raw)
        except DataValidationError as e:
            raise RowParseError(row_number, column.name, raw, e.rule, e.reason) from e
        if column.group is None:
            values[column.field] = value
        else:
            slot = slots.setdefault(column.group, {}).setdefault(
                column.slot, {"slot": column.slot}
            )
            slot[column.field] = value

    for group in schema.groups:
        group_slots = slots.get(group.name, {})
        values[group.name] = [
            group_slots[i]
            for i in sorted(group_slots)
            if group_slots[i].get(group.key) is not None
        ]

    try:
        return schema.build(values)
    except DataValidationError as e:
        raise RowParseError(row_number, e.field, e.value, e.rule, e.reason) from e


@dataclass
class BatchResult(Generic[R]):
    """Records and failures of one batch, both in row order."""

    records: list[R] = field(default_factory=list)
    failures: list[RowParseError] = field(default_factory=list)


def parse_batch(
    schema: RecordSchema[R],
    rows: Sequence[RawRow],
    *,
    stop_on_error: bool = False,
) -> BatchResult[R]:
    """
    Parse a batch of rows.

    Args:
        schema: Column table of the file.
        rows: Tokenized rows in file order.
        stop_on_error: Stop at the first failure (strict loads).

    Returns:
        BatchResult with accepted records and row failures.
    """
    result: BatchResult[R] = BatchResult()
    for row in rows:
        try:
            if row.error is not None:
                raise RowParseError(
                    row.number, None, None, ValidationRule.MALFORMED_ROW, row.error
                )
            result.records.append(parse_row(schema, row.fields, row.number))
        except RowParseError as e:
            result.failures.append(e)
            if stop_on_error:
                break
    return result
