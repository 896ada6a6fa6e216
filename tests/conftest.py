"""Pytest configuration and shared fixtures."""

from datetime import date
from pathlib import Path

import pytest
from factories import (
    GENERAL_PRACTICE,
    MENTAL_HEALTH_CLINIC,
    NPI_A,
    NPI_B,
    NPI_C,
    NPI_D,
    deactivated_values,
    individual_values,
    make_npi,
    make_provider,
    organization_values,
    write_main_file,
    write_reference_files,
)

from nppes.config.settings import DataPathsConfig, IngestionConfig, NppesConfig
from nppes.models.identifiers import EntityType
from nppes.store.provider_store import ProviderStore


@pytest.fixture
def small_batches() -> IngestionConfig:
    """Ingestion settings that force several batches and chunks on tiny files."""
    return IngestionConfig(batch_size=2, max_workers=2, chunk_batches=1)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """
    Directory with a complete synthetic dataset.

    Main file: A (individual, CA), B (organization, NY),
    C (individual, CA, two taxonomies), D (deactivated).
    """
    directory = tmp_path / "nppes"
    directory.mkdir()
    write_main_file(
        directory,
        [
            individual_values(NPI_A),
            organization_values(NPI_B),
            individual_values(
                NPI_C,
                taxonomies=(GENERAL_PRACTICE, MENTAL_HEALTH_CLINIC),
                extra={"Provider Last Name (Legal Name)": "JONES"},
            ),
            deactivated_values(NPI_D),
        ],
    )
    write_reference_files(directory)
    return directory


@pytest.fixture
def nppes_config(data_dir: Path, small_batches: IngestionConfig) -> NppesConfig:
    """Configuration pointing at the synthetic dataset."""
    return NppesConfig(
        data_paths=DataPathsConfig(data_root=data_dir),
        ingestion=small_batches,
    )


@pytest.fixture
def store() -> ProviderStore:
    """
    Store with a mix of entity types, states, taxonomies and statuses.

    Provider 3 is JANE JONES, provider 5 is VALLEY HEALTH and provider 8
    holds a taxonomy without primary flag. No taxonomy reference is attached.
    """
    records = [
        make_provider(
            make_npi(1),
            state="CA",
            enumerated=date(2005, 5, 23),
            updated=date(2007, 7, 8),
        ),
        make_provider(
            make_npi(2),
            entity_type=EntityType.ORGANIZATION,
            state="NY",
            codes=(MENTAL_HEALTH_CLINIC,),
            enumerated=date(2010, 1, 12),
        ),
        make_provider(
            make_npi(3),
            state="CA",
            codes=(GENERAL_PRACTICE, MENTAL_HEALTH_CLINIC),
            enumerated=date(2012, 6, 1),
            updated=date(2019, 4, 1),
            name="JONES",
        ),
        make_provider(
            make_npi(4),
            state="TX",
            codes=(GENERAL_PRACTICE,),
            enumerated=date(2018, 3, 3),
            deactivated=date(2021, 2, 2),
        ),
        make_provider(
            make_npi(5),
            entity_type=EntityType.ORGANIZATION,
            state="CA",
            codes=(MENTAL_HEALTH_CLINIC,),
            updated=date(2022, 1, 1),
            name="VALLEY HEALTH",
        ),
        make_provider(make_npi(6), state=None, practice_state="TX", codes=()),
        make_provider(
            make_npi(7),
            entity_type=None,
            state=None,
            codes=(),
            deactivated=date(2019, 9, 9),
        ),
        make_provider(
            make_npi(8),
            state="NY",
            enumerated=date(2020, 12, 31),
            updated=date(2021, 5, 5),
            primary=False,
        ),
    ]
    return ProviderStore.build(records)
