"""
Loader for the main NPPES provider file.
"""

import threading
from pathlib import Path

from nppes.config.settings import NppesConfig
from nppes.ingestion.base import RecordLoader
from nppes.ingestion.pipeline import LoadOptions, LoadReport
from nppes.models.records import ProviderRecord
from nppes.schemas.main import MAIN_SCHEMA


class ProviderLoader(RecordLoader[ProviderRecord, list[ProviderRecord]]):
    """Loader for npidata_pfile_*.csv."""

    schema = MAIN_SCHEMA
    path_attr = "providers"
    file_pattern = "npidata_pfile_*.csv"

    def _collect(self, records: list[ProviderRecord]) -> list[ProviderRecord]:
        return records


def load_providers(
    config: NppesConfig,
    path: Path | None = None,
    options: LoadOptions | None = None,
    *,
    cancel: threading.Event | None = None,
) -> tuple[list[ProviderRecord], LoadReport]:
    """
    Load provider records from the main file.

    Args:
        config: Configuration.
        path: Explicit file path (defaults to the configured or discovered one).
        options: Load switches.
        cancel: Optional cancellation event.

    Returns:
        Provider records in file order and the load report.
    """
    return ProviderLoader(config, path).load(options, cancel=cancel)
