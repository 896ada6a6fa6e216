"""
Core validation logic for NPPES files.

Checks that every dataset file can be found and that its header matches
the registered column table. Optionally parses a sample of rows.
"""

from dataclasses import dataclass
from itertools import islice
from pathlib import Path

from nppes.config.settings import NppesConfig
from nppes.dataset import LOADERS
from nppes.errors import NppesError, NppesFileNotFoundError, SchemaMismatchError
from nppes.ingestion.parser import parse_batch
from nppes.ingestion.reader import DelimitedReader
from nppes.utils.logging import get_logger

log = get_logger(__name__)

# Dataset parts that must be present; the others are optional.
REQUIRED_PARTS = frozenset({"providers"})


@dataclass
class ValidationResult:
    """Result of validating a single dataset file."""

    dataset_name: str
    schema_name: str
    file_path: Path | None
    exists: bool
    schema_valid: bool | None
    row_count: int | None
    error_message: str | None
    invalid_rows: int | None = None
    required: bool = False

    @property
    def passed(self) -> bool:
        """A missing optional file does not fail validation."""
        if not self.exists:
            return not self.required
        return bool(self.schema_valid) and not self.invalid_rows


class ValidationRunner:
    """
    Runs validation for all dataset files.

    Validates file headers against their registered schemas and reports results.
    """

    def __init__(self, config: NppesConfig, *, sample_rows: int = 0) -> None:
        """
        Initialize validation runner.

        Args:
            config: Configuration containing data paths.
            sample_rows: Number of data rows per file to parse (0 = header only).
        """
        self.config = config
        self.sample_rows = sample_rows

    def run(self) -> list[ValidationResult]:
        """
        Run validation for all dataset files.

        Returns:
            List of validation results, one per dataset part.
        """
        return [self._validate_dataset(part) for part in LOADERS]

    def _validate_dataset(self, part: str) -> ValidationResult:
        loader_cls = LOADERS[part]
        schema = loader_cls.schema
        required = part in REQUIRED_PARTS

        try:
            file_path: Path | None = loader_cls(self.config).resolve_path()
        except NppesFileNotFoundError:
            file_path = None

        if file_path is None or not file_path.exists():
            log.warning("Data file not found", dataset=part, path=str(file_path))
            return ValidationResult(
                dataset_name=part,
                schema_name=schema.name,
                file_path=file_path,
                exists=False,
                schema_valid=None,
                row_count=None,
                error_message="File not found",
                required=required,
            )

        try:
            with DelimitedReader(file_path, encoding=self.config.ingestion.encoding) as reader:
                schema.validate_header(reader.header())
                row_count = None
                invalid_rows = None
                if self.sample_rows > 0:
                    rows = list(islice(reader.rows(), self.sample_rows))
                    result = parse_batch(schema, rows)
                    row_count = len(rows)
                    invalid_rows = len(result.failures)
                    for failure in result.failures[:3]:
                        log.warning("Invalid sample row", dataset=part, error=str(failure))
        except SchemaMismatchError as e:
            log.error("Header validation failed", dataset=part, error=str(e))
            return ValidationResult(
                dataset_name=part,
                schema_name=schema.name,
                file_path=file_path,
                exists=True,
                schema_valid=False,
                row_count=None,
                error_message=str(e),
                required=required,
            )
        except NppesError as e:
            error_msg = f"{type(e).__name__}: {e!s}"
            log.error("Validation error", dataset=part, error=error_msg)
            return ValidationResult(
                dataset_name=part,
                schema_name=schema.name,
                file_path=file_path,
                exists=True,
                schema_valid=False,
                row_count=None,
                error_message=error_msg,
                required=required,
            )

        log.info("Validation passed", dataset=part, schema=schema.name, rows=row_count)
        error_message = None
        if invalid_rows:
            error_message = f"{invalid_rows} of {row_count} sampled rows are invalid"
        return ValidationResult(
            dataset_name=part,
            schema_name=schema.name,
            file_path=file_path,
            exists=True,
            schema_valid=True,
            row_count=row_count,
            error_message=error_message,
            invalid_rows=invalid_rows,
            required=required,
        )
