"""Tests for the bulk ingestion pipeline."""

import threading
from collections import Counter
from pathlib import Path

import pytest
from factories import (
    INVALID_CHECKSUM_NPI,
    MAIN_FILE_NAME,
    NPI_A,
    NPI_B,
    NPI_C,
    individual_values,
    main_row,
    make_npi,
    organization_values,
    write_csv,
    write_main_file,
)

from nppes.config.settings import IngestionConfig
from nppes.errors import RowParseError, SchemaMismatchError, ValidationRule
from nppes.ingestion.pipeline import IngestionPipeline, LoadOptions
from nppes.models.records import ProviderRecord
from nppes.schemas.main import MAIN_SCHEMA
from nppes.store.provider_store import ProviderStore

SKIP = LoadOptions(skip_invalid=True)
STRICT = LoadOptions(skip_invalid=False)


class CancelAfter(threading.Event):
    """Event that reports itself set after a number of checks."""

    def __init__(self, checks: int) -> None:
        super().__init__()
        self.remaining = checks

    def is_set(self) -> bool:
        self.remaining -= 1
        return self.remaining < 0


def _pipeline(config: IngestionConfig | None = None) -> IngestionPipeline[ProviderRecord]:
    return IngestionPipeline(MAIN_SCHEMA, config)


def _numbered_file(directory: Path, count: int) -> tuple[Path, list[str]]:
    npis = [make_npi(i) for i in range(1, count + 1)]
    path = write_main_file(directory, [individual_values(npi) for npi in npis])
    return path, npis


class TestHeaderValidation:
    """Tests for header checks before any row is parsed."""

    @pytest.mark.parametrize("position", [0, 3, 47, 106, 314, 329])
    def test_mismatch_raises(self, tmp_path: Path, position: int) -> None:
        """Test that renaming any single column aborts the load."""
        header = list(MAIN_SCHEMA.header)
        header[position] = "Renamed Column"
        path = write_csv(tmp_path / MAIN_FILE_NAME, header, [main_row(individual_values(NPI_A))])
        with pytest.raises(SchemaMismatchError) as exc_info:
            _pipeline().load(path, SKIP)
        assert exc_info.value.position == position

    @pytest.mark.parametrize("name", ["{} ", " {}", "{}\t"])
    def test_padded_name_raises(self, tmp_path: Path, name: str) -> None:
        """Test that whitespace around a header name is not accepted."""
        header = list(MAIN_SCHEMA.header)
        header[3] = name.format(header[3])
        path = write_csv(tmp_path / MAIN_FILE_NAME, header, [main_row(individual_values(NPI_A))])
        with pytest.raises(SchemaMismatchError):
            _pipeline().load(path, SKIP)

    def test_mismatch_ignored_when_disabled(self, tmp_path: Path) -> None:
        """Test that header validation can be switched off."""
        header = list(MAIN_SCHEMA.header)
        header[3] = "EIN"
        path = write_csv(tmp_path / MAIN_FILE_NAME, header, [main_row(individual_values(NPI_A))])
        records, report = _pipeline().load(
            path, LoadOptions(validate_header=False, skip_invalid=True)
        )
        assert [r.npi for r in records] == [NPI_A]
        assert report.accepted == 1


class TestSkipAndStrict:
    """Tests for skip-invalid and strict modes."""

    def _mixed_file(self, directory: Path) -> Path:
        return write_main_file(
            directory,
            [
                individual_values(NPI_A),
                individual_values(INVALID_CHECKSUM_NPI),
                organization_values(NPI_B),
                individual_values(NPI_C, extra={"Provider Enumeration Date": "2005-05-23"}),
                individual_values(make_npi(99)),
            ],
        )

    def test_skip_mode_keeps_valid_rows(
        self, tmp_path: Path, small_batches: IngestionConfig
    ) -> None:
        """Test that N rows with k invalid give N - k records."""
        path = self._mixed_file(tmp_path)
        records, report = _pipeline(small_batches).load(path, SKIP)
        assert [r.npi for r in records] == [NPI_A, NPI_B, make_npi(99)]
        assert report.total_rows == 5
        assert report.accepted == 3
        assert report.skipped == 2
        assert [f.row for f in report.failures] == [2, 4]
        assert report.skip_reasons() == Counter(
            {ValidationRule.CHECKSUM: 1, ValidationRule.MALFORMED_DATE: 1}
        )
        assert not report.cancelled

    def test_strict_mode_raises_first_invalid_row(
        self, tmp_path: Path, small_batches: IngestionConfig
    ) -> None:
        """Test that strict loads abort on the first invalid row."""
        path = self._mixed_file(tmp_path)
        with pytest.raises(RowParseError) as exc_info:
            _pipeline(small_batches).load(path, STRICT)
        assert exc_info.value.row == 2
        assert exc_info.value.rule is ValidationRule.CHECKSUM

    def test_strict_mode_first_failure_across_parallel_batches(self, tmp_path: Path) -> None:
        """Test that the lowest failing row wins when batches fail concurrently."""
        path = write_main_file(
            tmp_path,
            [
                individual_values(NPI_A),
                individual_values(NPI_B),
                individual_values(INVALID_CHECKSUM_NPI),
                individual_values(NPI_C, extra={"Entity Type Code": "9"}),
            ],
        )
        config = IngestionConfig(batch_size=1, max_workers=4, chunk_batches=1)
        with pytest.raises(RowParseError) as exc_info:
            _pipeline(config).load(path, STRICT)
        assert exc_info.value.row == 3

    def test_options_default_to_config(self, tmp_path: Path) -> None:
        """Test that skip_invalid comes from IngestionConfig when no options are given."""
        path = self._mixed_file(tmp_path)
        records, report = _pipeline(IngestionConfig(skip_invalid=True)).load(path)
        assert len(records) == 3
        assert report.skipped == 2
        with pytest.raises(RowParseError):
            _pipeline(IngestionConfig(skip_invalid=False)).load(path)


class TestOrdering:
    """Tests for file-order output under parallel parsing."""

    @pytest.mark.parametrize(
        ("batch_size", "max_workers", "chunk_batches"),
        [(1, 1, 1), (3, 3, 2), (4, 2, 1), (100, 4, 4)],
    )
    def test_records_in_file_order(
        self, tmp_path: Path, batch_size: int, max_workers: int, chunk_batches: int
    ) -> None:
        """Test that output order equals file order for any batch layout."""
        path, npis = _numbered_file(tmp_path, 25)
        config = IngestionConfig(
            batch_size=batch_size, max_workers=max_workers, chunk_batches=chunk_batches
        )
        records, report = _pipeline(config).load(path, SKIP)
        assert [r.npi for r in records] == npis
        assert report.total_rows == 25

    def test_skipped_rows_in_file_order(self, tmp_path: Path) -> None:
        """Test that failures are reported in row order."""
        rows = [individual_values(make_npi(i)) for i in range(1, 13)]
        for i in (10, 3, 7):
            rows[i - 1] = individual_values(INVALID_CHECKSUM_NPI)
        path = write_main_file(tmp_path, rows)
        config = IngestionConfig(batch_size=2, max_workers=3, chunk_batches=1)
        _, report = _pipeline(config).load(path, SKIP)
        assert [f.row for f in report.failures] == [3, 7, 10]


class TestCancellation:
    """Tests for cooperative cancellation."""

    def test_cancel_before_start(self, tmp_path: Path) -> None:
        """Test that a pre-set event returns no records."""
        path, _ = _numbered_file(tmp_path, 5)
        cancel = threading.Event()
        cancel.set()
        records, report = _pipeline().load(path, SKIP, cancel=cancel)
        assert records == []
        assert report.cancelled
        assert report.total_rows == 0

    def test_cancel_between_chunks(
        self, tmp_path: Path, small_batches: IngestionConfig
    ) -> None:
        """Test that records loaded before cancellation are a file-order prefix."""
        path, npis = _numbered_file(tmp_path, 10)
        records, report = _pipeline(small_batches).load(path, SKIP, cancel=CancelAfter(1))
        assert report.cancelled
        assert [r.npi for r in records] == npis[: small_batches.chunk_size]
        assert report.total_rows == small_batches.chunk_size

    def test_unset_event_loads_everything(self, tmp_path: Path) -> None:
        """Test that an event that is never set does not interfere."""
        path, npis = _numbered_file(tmp_path, 5)
        records, report = _pipeline().load(path, SKIP, cancel=threading.Event())
        assert [r.npi for r in records] == npis
        assert not report.cancelled


class TestMalformedRows:
    """Tests for structurally broken rows."""

    def test_malformed_quote_row_is_skipped(self, tmp_path: Path) -> None:
        """Test that a quoting fault costs exactly one row."""
        path = write_main_file(
            tmp_path, [individual_values(NPI_A), organization_values(NPI_B)]
        )
        lines = path.read_text(encoding="utf-8").splitlines(keepends=True)
        lines.insert(2, f'"{NPI_C}"X,"1"\r\n')
        path.write_text("".join(lines), encoding="utf-8", newline="")

        records, report = _pipeline().load(path, SKIP)
        assert [r.npi for r in records] == [NPI_A, NPI_B]
        assert [(f.row, f.rule) for f in report.failures] == [(2, ValidationRule.MALFORMED_ROW)]

    def test_wrong_field_count(self, tmp_path: Path) -> None:
        """Test that a row with missing fields is a field-count failure."""
        path = write_main_file(tmp_path, [individual_values(NPI_A)])
        with path.open("a", encoding="utf-8", newline="") as f:
            f.write(f'"{NPI_B}","2"\r\n')
        records, report = _pipeline().load(path, SKIP)
        assert len(records) == 1
        assert report.failures[0].rule is ValidationRule.FIELD_COUNT
        assert report.failures[0].row == 2


class TestEndToEnd:
    """Load-then-index scenario across the pipeline and store."""

    def test_valid_invalid_valid(self, tmp_path: Path) -> None:
        """Test A valid (CA), B bad checksum, C valid (NY) in skip mode."""
        path = write_main_file(
            tmp_path,
            [
                individual_values(NPI_A, state="CA"),
                individual_values(INVALID_CHECKSUM_NPI, state="CA"),
                organization_values(NPI_C, state="NY"),
            ],
        )
        records, report = _pipeline().load(path, SKIP)
        assert [r.npi for r in records] == [NPI_A, NPI_C]
        assert report.skipped == 1
        assert report.failures[0].row == 2
        assert report.failures[0].rule is ValidationRule.CHECKSUM

        store = ProviderStore.build(records)
        assert store.find_by_state("CA") == {NPI_A}
        assert store.find_by_state("NY") == {NPI_C}

    def test_both_valid_rows_in_same_state(self, tmp_path: Path) -> None:
        """Test A (CA), B bad checksum, C (CA): only A and C are indexed under CA."""
        path = write_main_file(
            tmp_path,
            [
                individual_values(NPI_A, state="CA"),
                individual_values(INVALID_CHECKSUM_NPI, state="NY"),
                individual_values(NPI_C, state="CA"),
            ],
        )
        records, report = _pipeline().load(path, SKIP)
        assert report.total_rows == 3
        assert report.accepted == 2
        assert report.skipped == 1

        store = ProviderStore.build(records)
        assert len(store) == 2
        assert store.find_by_state("CA") == {NPI_A, NPI_C}
        assert store.find_by_state("NY") == frozenset()
