"""
Loaders for the four reference files.

Reference rows are not checked against the main file: an NPI with no
provider is kept and only shows up as "no matching provider" on lookup.
"""

import threading
from pathlib import Path

from nppes.config.settings import NppesConfig
from nppes.errors import DuplicateIdentifierError
from nppes.ingestion.base import RecordLoader, group_by_npi
from nppes.ingestion.pipeline import LoadOptions, LoadReport
from nppes.models.identifiers import Npi
from nppes.models.records import (
    EndpointRecord,
    OtherNameRecord,
    PracticeLocationRecord,
    TaxonomyReference,
)
from nppes.schemas.reference import (
    ENDPOINT_SCHEMA,
    OTHER_NAME_SCHEMA,
    PRACTICE_LOCATION_SCHEMA,
    TAXONOMY_SCHEMA,
)


class TaxonomyReferenceLoader(RecordLoader[TaxonomyReference, dict[str, TaxonomyReference]]):
    """Loader for nucc_taxonomy_*.csv, keyed by taxonomy code."""

    schema = TAXONOMY_SCHEMA
    path_attr = "taxonomy"
    file_pattern = "nucc_taxonomy_*.csv"

    def _collect(self, records: list[TaxonomyReference]) -> dict[str, TaxonomyReference]:
        """
        Index taxonomy rows by code.

        Raises:
            DuplicateIdentifierError: If a code occurs twice.
        """
        by_code: dict[str, TaxonomyReference] = {}
        for record in records:
            if record.code in by_code:
                raise DuplicateIdentifierError(record.code, kind="taxonomy code")
            by_code[record.code] = record
        return by_code


class OtherNameLoader(RecordLoader[OtherNameRecord, dict[Npi, list[OtherNameRecord]]]):
    """Loader for othername_pfile_*.csv."""

    schema = OTHER_NAME_SCHEMA
    path_attr = "other_names"
    file_pattern = "othername_pfile_*.csv"

    def _collect(self, records: list[OtherNameRecord]) -> dict[Npi, list[OtherNameRecord]]:
        return group_by_npi(records)


class PracticeLocationLoader(
    RecordLoader[PracticeLocationRecord, dict[Npi, list[PracticeLocationRecord]]]
):
    """Loader for pl_pfile_*.csv."""

    schema = PRACTICE_LOCATION_SCHEMA
    path_attr = "practice_locations"
    file_pattern = "pl_pfile_*.csv"

    def _collect(
        self, records: list[PracticeLocationRecord]
    ) -> dict[Npi, list[PracticeLocationRecord]]:
        return group_by_npi(records)


class EndpointLoader(RecordLoader[EndpointRecord, dict[Npi, list[EndpointRecord]]]):
    """Loader for endpoint_pfile_*.csv."""

    schema = ENDPOINT_SCHEMA
    path_attr = "endpoints"
    file_pattern = "endpoint_pfile_*.csv"

    def _collect(self, records: list[EndpointRecord]) -> dict[Npi, list[EndpointRecord]]:
        return group_by_npi(records)


def load_taxonomy_reference(
    config: NppesConfig,
    path: Path | None = None,
    options: LoadOptions | None = None,
    *,
    cancel: threading.Event | None = None,
) -> tuple[dict[str, TaxonomyReference], LoadReport]:
    """Load the NUCC taxonomy code set keyed by code."""
    return TaxonomyReferenceLoader(config, path).load(options, cancel=cancel)


def load_other_names(
    config: NppesConfig,
    path: Path | None = None,
    options: LoadOptions | None = None,
    *,
    cancel: threading.Event | None = None,
) -> tuple[dict[Npi, list[OtherNameRecord]], LoadReport]:
    """Load other organization names grouped by NPI."""
    return OtherNameLoader(config, path).load(options, cancel=cancel)


def load_practice_locations(
    config: NppesConfig,
    path: Path | None = None,
    options: LoadOptions | None = None,
    *,
    cancel: threading.Event | None = None,
) -> tuple[dict[Npi, list[PracticeLocationRecord]], LoadReport]:
    """Load secondary practice locations grouped by NPI."""
    return PracticeLocationLoader(config, path).load(options, cancel=cancel)


def load_endpoints(
    config: NppesConfig,
    path: Path | None = None,
    options: LoadOptions | None = None,
    *,
    cancel: threading.Event | None = None,
) -> tuple[dict[Npi, list[EndpointRecord]], LoadReport]:
    """Load electronic endpoints grouped by NPI."""
    return EndpointLoader(config, path).load(options, cancel=cancel)
