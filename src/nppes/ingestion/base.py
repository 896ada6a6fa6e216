"""
Base classes and utilities for file loaders.

A loader binds a schema and a configured file location to the ingestion
pipeline and shapes the parsed records into the collection its callers
use (a list for the main file, mappings for reference files).
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any, ClassVar, Generic, TypeVar

from nppes.config.settings import NppesConfig
from nppes.errors import NppesFileNotFoundError
from nppes.ingestion.pipeline import IngestionPipeline, LoadOptions, LoadReport
from nppes.models.identifiers import Npi
from nppes.schemas.columns import RecordSchema
from nppes.utils.logging import get_logger

log = get_logger(__name__)

R = TypeVar("R")
C = TypeVar("C")


class RecordLoader(ABC, Generic[R, C]):
    """
    Abstract base class for NPPES file loaders.

    Subclasses set ``schema``, ``path_attr`` (field of DataPathsConfig)
    and ``file_pattern`` (glob used when no explicit path is configured).
    """

    schema: ClassVar[RecordSchema[Any]]
    path_attr: ClassVar[str]
    file_pattern: ClassVar[str]

    def __init__(self, config: NppesConfig, path: Path | None = None) -> None:
        """
        Initialize loader.

        Args:
            config: Configuration with data paths and ingestion settings.
            path: Explicit file path, overriding the configured one.
        """
        self.config = config
        self.path = path

    @abstractmethod
    def _collect(self, records: list[R]) -> C:
        """Shape parsed records into the loader's result collection."""
        ...

    def load(
        self,
        options: LoadOptions | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> tuple[C, LoadReport]:
        """
        Load the file.

        Args:
            options: Load switches (defaults from config.ingestion).
            cancel: Optional cancellation event.

        Returns:
            The collected records and the load report.
        """
        path = self.resolve_path()
        log.info("Loading data", loader=self.__class__.__name__, path=str(path))
        pipeline: IngestionPipeline[R] = IngestionPipeline(self.schema, self.config.ingestion)
        records, report = pipeline.load(path, options, cancel=cancel)
        return self._collect(records), report

    def resolve_path(self) -> Path:
        """
        Determine the file to read.

        Order: explicit path, configured path (relative to data_root),
        newest file in data_root matching ``file_pattern``.

        Raises:
            NppesFileNotFoundError: If no file can be found.
        """
        if self.path is not None:
            return self.path
        paths = self.config.data_paths
        if getattr(paths, self.path_attr) is not None:
            return paths.resolve(self.path_attr)
        found = self.find(paths.data_root)
        if found is None:
            raise NppesFileNotFoundError(paths.data_root / self.file_pattern)
        return found

    @classmethod
    def find(cls, directory: Path) -> Path | None:
        """
        Find this loader's file in a directory by its standard name.

        Header-only ``*_fileheader.csv`` companions are ignored; when several
        files match, the lexicographically last (newest date stamp) wins.
        """
        if not directory.is_dir():
            return None
        matches = sorted(
            p
            for p in directory.glob(cls.file_pattern)
            if p.is_file() and not p.name.lower().endswith("_fileheader.csv")
        )
        return matches[-1] if matches else None


def group_by_npi(records: Iterable[R], key: str = "npi") -> dict[Npi, list[R]]:
    """Group records by provider NPI, keeping file order within each NPI."""
    grouped: dict[Npi, list[R]] = {}
    for record in records:
        grouped.setdefault(getattr(record, key), []).append(record)
    return grouped
