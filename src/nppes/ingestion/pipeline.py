"""
Bulk loading of one delimited file into typed records.

The file is read sequentially in bounded chunks. Each chunk is cut into
batches that are parsed on a fixed thread pool; the batch results are
concatenated in file order once every batch of the chunk is done.
"""

import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Generic, TypeVar

from nppes.config.settings import IngestionConfig
from nppes.errors import RowParseError, SchemaMismatchError, ValidationRule
from nppes.ingestion.parser import BatchResult, parse_batch
from nppes.ingestion.reader import DelimitedReader, RawRow
from nppes.schemas.columns import RecordSchema
from nppes.utils.logging import get_logger, log_context

log = get_logger(__name__)

R = TypeVar("R")

# Individual skipped rows are logged up to this many per load.
MAX_LOGGED_FAILURES = 10


@dataclass(frozen=True)
class LoadOptions:
    """Per-load switches."""

    validate_header: bool = True
    skip_invalid: bool = False

    @classmethod
    def from_config(cls, config: IngestionConfig) -> "LoadOptions":
        return cls(
            validate_header=config.validate_header,
            skip_invalid=config.skip_invalid,
        )


@dataclass
class LoadReport:
    """
    Outcome of a load.

    Attributes:
        path: File that was loaded.
        schema: Name of the schema used.
        total_rows: Data rows read (accepted plus skipped).
        accepted: Records returned.
        failures: One error per skipped row, in row order.
        cancelled: True if the load stopped early on request.
    """

    path: Path
    schema: str
    total_rows: int = 0
    accepted: int = 0
    failures: list[RowParseError] = field(default_factory=list)
    cancelled: bool = False

    @property
    def skipped(self) -> int:
        return len(self.failures)

    def skip_reasons(self) -> Counter[ValidationRule]:
        """Count skipped rows per violated rule."""
        return Counter(failure.rule for failure in self.failures)


class IngestionPipeline(Generic[R]):
    """
    Loads a file described by a ``RecordSchema``.

    Example:
        pipeline = IngestionPipeline(MAIN_SCHEMA, config.ingestion)
        records, report = pipeline.load(path, LoadOptions(skip_invalid=True))
    """

    def __init__(self, schema: RecordSchema[R], config: IngestionConfig | None = None) -> None:
        """
        Initialize pipeline.

        Args:
            schema: Column table of the file.
            config: Batch sizing, worker count and file encoding.
        """
        self.schema = schema
        self.config = config or IngestionConfig()

    def load(
        self,
        path: Path,
        options: LoadOptions | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> tuple[list[R], LoadReport]:
        """
        Load all rows of a file.

        Args:
            path: File to read.
            options: Header validation and skip-invalid switches. Defaults
                to the values in the pipeline's IngestionConfig.
            cancel: Event checked between chunks; when set, the records and
                report accumulated so far are returned.

        Returns:
            Records in file order and the load report.

        Raises:
            NppesFileNotFoundError: If the file does not exist.
            NppesIOError: If the file cannot be read.
            SchemaMismatchError: If header validation is on and the header
                differs from the schema.
            RowParseError: In strict mode, for the first invalid row.
        """
        options = options or LoadOptions.from_config(self.config)
        report = LoadReport(path=path, schema=self.schema.name)
        records: list[R] = []

        with log_context(path=str(path), schema=self.schema.name):
            log.info("Loading file", skip_invalid=options.skip_invalid)
            with DelimitedReader(path, encoding=self.config.encoding) as reader:
                header = reader.header()
                if options.validate_header:
                    try:
                        self.schema.validate_header(header)
                    except SchemaMismatchError as e:
                        log.error("Header mismatch", position=e.position)
                        raise

                parse = partial(
                    parse_batch, self.schema, stop_on_error=not options.skip_invalid
                )
                chunks = reader.chunks(self.config.chunk_size)
                with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                    while True:
                        if cancel is not None and cancel.is_set():
                            report.cancelled = True
                            log.warning("Load cancelled", rows_read=report.total_rows)
                            break
                        chunk = next(chunks, None)
                        if chunk is None:
                            break
                        results = list(executor.map(parse, self._batches(chunk)))
                        report.total_rows += len(chunk)
                        self._collect(results, records, report, options)

            report.accepted = len(records)
            log.info(
                "Loaded records",
                rows=report.total_rows,
                accepted=report.accepted,
                skipped=report.skipped,
            )
        return records, report

    def _batches(self, chunk: list[RawRow]) -> list[list[RawRow]]:
        size = self.config.batch_size
        return [chunk[i : i + size] for i in range(0, len(chunk), size)]

    def _collect(
        self,
        results: list[BatchResult[R]],
        records: list[R],
        report: LoadReport,
        options: LoadOptions,
    ) -> None:
        """Append one chunk's batch results in order, or raise in strict mode."""
        failures = [failure for result in results for failure in result.failures]
        if failures and not options.skip_invalid:
            first = min(failures, key=lambda failure: failure.row)
            log.error("Invalid row, aborting load", row=first.row, error=str(first))
            raise first

        for result in results:
            records.extend(result.records)
        for failure in failures:
            if report.skipped < MAX_LOGGED_FAILURES:
                log.warning("Skipping invalid row", row=failure.row, error=str(failure))
            report.failures.append(failure)
