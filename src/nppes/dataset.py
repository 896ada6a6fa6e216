"""
Assembly of a complete NPPES dataset into a provider store.

Finds the main file and the reference files, loads each one and builds
the store. Reference files are optional; the main file is not.
"""

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from nppes.config.settings import NppesConfig
from nppes.errors import NppesFileNotFoundError
from nppes.ingestion.base import RecordLoader
from nppes.ingestion.pipeline import LoadOptions, LoadReport
from nppes.ingestion.providers import ProviderLoader
from nppes.ingestion.reference import (
    EndpointLoader,
    OtherNameLoader,
    PracticeLocationLoader,
    TaxonomyReferenceLoader,
)
from nppes.store.provider_store import ProviderStore
from nppes.utils.logging import get_logger

log = get_logger(__name__)

# Dataset part -> loader class. Keys match the DataPathsConfig fields.
LOADERS: dict[str, type[RecordLoader[Any, Any]]] = {
    "providers": ProviderLoader,
    "taxonomy": TaxonomyReferenceLoader,
    "other_names": OtherNameLoader,
    "practice_locations": PracticeLocationLoader,
    "endpoints": EndpointLoader,
}

REFERENCE_PARTS = ("taxonomy", "other_names", "practice_locations", "endpoints")


@dataclass(frozen=True)
class DatasetFiles:
    """Located dataset files; reference files may be missing."""

    providers: Path | None = None
    taxonomy: Path | None = None
    other_names: Path | None = None
    practice_locations: Path | None = None
    endpoints: Path | None = None

    def as_dict(self) -> dict[str, Path | None]:
        return {part: getattr(self, part) for part in LOADERS}


@dataclass
class DatasetLoadResult:
    """Store built from a dataset plus one load report per file read."""

    store: ProviderStore
    reports: dict[str, LoadReport] = field(default_factory=dict)

    @property
    def cancelled(self) -> bool:
        return any(report.cancelled for report in self.reports.values())


def discover_files(directory: Path) -> DatasetFiles:
    """
    Find NPPES files in a directory by their standard names.

    Args:
        directory: Directory to search (not recursive).

    Returns:
        DatasetFiles with the newest match per part.
    """
    return DatasetFiles(**{part: loader.find(directory) for part, loader in LOADERS.items()})


def resolve_files(config: NppesConfig) -> DatasetFiles:
    """
    Locate every dataset part, preferring configured paths over discovery.

    A configured path that does not exist is still returned so that
    loading it reports the missing file.
    """
    found: dict[str, Path | None] = {}
    for part, loader_cls in LOADERS.items():
        try:
            found[part] = loader_cls(config).resolve_path()
        except NppesFileNotFoundError:
            found[part] = None
    return DatasetFiles(**found)


def load_dataset(
    config: NppesConfig,
    options: LoadOptions | None = None,
    *,
    cancel: threading.Event | None = None,
    include_references: bool = True,
) -> DatasetLoadResult:
    """
    Load the main file and all available reference files into a store.

    Args:
        config: Configuration.
        options: Load switches applied to every file.
        cancel: Cancellation event; once set, remaining files are skipped
            and the store is built from what was loaded.
        include_references: Load reference files when available.

    Returns:
        DatasetLoadResult with the store and load reports.

    Raises:
        NppesFileNotFoundError: If the main provider file cannot be found.
    """
    files = resolve_files(config)
    if files.providers is None:
        raise NppesFileNotFoundError(config.data_paths.data_root / ProviderLoader.file_pattern)

    reports: dict[str, LoadReport] = {}
    providers, reports["providers"] = ProviderLoader(config, files.providers).load(
        options, cancel=cancel
    )

    references: dict[str, Any] = {}
    for part in REFERENCE_PARTS if include_references else ():
        path = getattr(files, part)
        if path is None:
            log.info("Reference file not found, skipping", part=part)
            continue
        if cancel is not None and cancel.is_set():
            break
        references[part], reports[part] = LOADERS[part](config, path).load(
            options, cancel=cancel
        )

    store = ProviderStore.build(providers, **references)
    return DatasetLoadResult(store=store, reports=reports)
