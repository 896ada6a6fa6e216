"""Builders for synthetic NPPES rows, files and records used across tests."""

import csv
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from pathlib import Path
from typing import Any

from nppes.models.identifiers import AddressKind, DeactivationReason, EntityType, Npi
from nppes.models.records import (
    Address,
    OrganizationName,
    PersonName,
    ProviderRecord,
    TaxonomyCode,
    TaxonomyReference,
)
from nppes.schemas.columns import RecordSchema
from nppes.schemas.main import MAIN_SCHEMA
from nppes.schemas.reference import (
    ENDPOINT_SCHEMA,
    OTHER_NAME_SCHEMA,
    PRACTICE_LOCATION_SCHEMA,
    TAXONOMY_SCHEMA,
)

NPI_A = "1234567893"
NPI_B = "1000000004"
NPI_C = "1000000012"
NPI_D = "1000000020"
NPI_E = "1000000038"
ORPHAN_NPI = "1000000996"  # make_npi(99), outside the store fixture
INVALID_CHECKSUM_NPI = "1234567890"

MAIN_FILE_NAME = "npidata_pfile_20050523-20240107.csv"
TAXONOMY_FILE_NAME = "nucc_taxonomy_240.csv"
OTHER_NAME_FILE_NAME = "othername_pfile_20050523-20240107.csv"
PRACTICE_LOCATION_FILE_NAME = "pl_pfile_20050523-20240107.csv"
ENDPOINT_FILE_NAME = "endpoint_pfile_20050523-20240107.csv"

FAMILY_MEDICINE = "207Q00000X"
GENERAL_PRACTICE = "208D00000X"
MENTAL_HEALTH_CLINIC = "261QM0801X"

# Reference without a row for GENERAL_PRACTICE.
TAXONOMY_REFERENCE = {
    FAMILY_MEDICINE: TaxonomyReference(
        FAMILY_MEDICINE,
        grouping="Allopathic & Osteopathic Physicians",
        classification="Family Medicine",
        display_name="Family Medicine Physician",
    ),
    MENTAL_HEALTH_CLINIC: TaxonomyReference(
        MENTAL_HEALTH_CLINIC,
        grouping="Ambulatory Health Care Facilities",
        classification="Clinic/Center",
        specialization="Mental Health",
    ),
}


def npi_check_digit(base: str) -> str:
    """
    Check digit for nine base digits.

    The 80840 prefix always contributes 24 to the Luhn sum, so only the
    base digits need doubling (first, third, ... from the left).
    """
    total = 24
    for i, char in enumerate(base):
        d = int(char)
        if i % 2 == 0:
            d *= 2
            if d > 9:
                d -= 9
        total += d
    return str((10 - total % 10) % 10)


def make_npi(n: int) -> str:
    """Valid NPI built from the integer ``n`` (< 10**8)."""
    base = f"1{n:08d}"
    return base + npi_check_digit(base)


def write_csv(path: Path, header: Sequence[str], rows: Iterable[Sequence[str]]) -> Path:
    """Write a fully quoted CSV file the way NPPES publishes it."""
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_ALL)
        writer.writerow(header)
        writer.writerows(rows)
    return path


def schema_row(schema: RecordSchema[Any], values: Mapping[str, str]) -> list[str]:
    """Lay out header-name -> value pairs as a full row; other columns are empty."""
    unknown = set(values) - set(schema.header)
    if unknown:
        msg = f"Not columns of {schema.name}: {sorted(unknown)}"
        raise KeyError(msg)
    return [values.get(name, "") for name in schema.header]


def main_row(values: Mapping[str, str]) -> list[str]:
    return schema_row(MAIN_SCHEMA, values)


def _taxonomy_values(codes: Sequence[str]) -> dict[str, str]:
    values = {}
    for i, code in enumerate(codes, start=1):
        values[f"Healthcare Provider Taxonomy Code_{i}"] = code
        values[f"Healthcare Provider Primary Taxonomy Switch_{i}"] = "Y" if i == 1 else "N"
        values[f"Provider License Number_{i}"] = f"L{i}00"
        values[f"Provider License Number State Code_{i}"] = "CA"
    return values


def individual_values(
    npi: str,
    *,
    state: str = "CA",
    taxonomies: Sequence[str] = (FAMILY_MEDICINE,),
    extra: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Main-file values of an active individual provider."""
    values = {
        "NPI": npi,
        "Entity Type Code": "1",
        "Provider Last Name (Legal Name)": "SMITH",
        "Provider First Name": "JANE",
        "Provider Credential Text": "M.D.",
        "Provider First Line Business Mailing Address": "100 MAIN ST",
        "Provider Business Mailing Address City Name": "SPRINGFIELD",
        "Provider Business Mailing Address State Name": state,
        "Provider Business Mailing Address Postal Code": "900100000",
        "Provider Business Mailing Address Country Code (If outside U.S.)": "US",
        "Provider Enumeration Date": "05/23/2005",
        "Last Update Date": "07/08/2007",
        "Provider Sex Code": "F",
        **_taxonomy_values(taxonomies),
    }
    values.update(extra or {})
    return values


def organization_values(
    npi: str,
    *,
    name: str = "ACME CLINIC",
    state: str = "NY",
    taxonomies: Sequence[str] = (MENTAL_HEALTH_CLINIC,),
    extra: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Main-file values of an active organization provider."""
    values = {
        "NPI": npi,
        "Entity Type Code": "2",
        "Provider Organization Name (Legal Business Name)": name,
        "Employer Identification Number (EIN)": "<UNAVAIL>",
        "Provider First Line Business Mailing Address": "1 PARK AVE",
        "Provider Business Mailing Address City Name": "NEW YORK",
        "Provider Business Mailing Address State Name": state,
        "Provider Business Mailing Address Postal Code": "10016",
        "Provider Enumeration Date": "01/12/2010",
        "Last Update Date": "03/01/2021",
        "Authorized Official Last Name": "DOE",
        "Authorized Official First Name": "JOHN",
        "Authorized Official Title or Position": "CEO",
        "Authorized Official Telephone Number": "2125550100",
        "Is Organization Subpart": "N",
        **_taxonomy_values(taxonomies),
    }
    values.update(extra or {})
    return values


def deactivated_values(npi: str, *, deactivated: str = "01/15/2020") -> dict[str, str]:
    """Main-file values of a deactivated NPI as published (almost everything blank)."""
    return {
        "NPI": npi,
        "NPI Deactivation Reason Code": "DT",
        "NPI Deactivation Date": deactivated,
    }


def write_main_file(
    directory: Path,
    rows: Iterable[Mapping[str, str]],
    name: str = MAIN_FILE_NAME,
) -> Path:
    return write_csv(directory / name, MAIN_SCHEMA.header, [main_row(r) for r in rows])


TAXONOMY_ROWS = [
    {
        "Code": FAMILY_MEDICINE,
        "Grouping": "Allopathic & Osteopathic Physicians",
        "Classification": "Family Medicine",
        "Display Name": "Family Medicine Physician",
        "Section": "Individual",
    },
    {
        "Code": GENERAL_PRACTICE,
        "Grouping": "Allopathic & Osteopathic Physicians",
        "Classification": "General Practice",
        "Display Name": "General Practice Physician",
        "Section": "Individual",
    },
    {
        "Code": MENTAL_HEALTH_CLINIC,
        "Grouping": "Ambulatory Health Care Facilities",
        "Classification": "Clinic/Center",
        "Specialization": "Mental Health (Including Community Mental Health Center)",
        "Section": "Non-Individual",
    },
]


def write_reference_files(directory: Path) -> dict[str, Path]:
    """Write all four reference files with a few rows each."""
    return {
        "taxonomy": write_csv(
            directory / TAXONOMY_FILE_NAME,
            TAXONOMY_SCHEMA.header,
            [schema_row(TAXONOMY_SCHEMA, r) for r in TAXONOMY_ROWS],
        ),
        "other_names": write_csv(
            directory / OTHER_NAME_FILE_NAME,
            OTHER_NAME_SCHEMA.header,
            [
                schema_row(
                    OTHER_NAME_SCHEMA,
                    {
                        "NPI": NPI_B,
                        "Provider Other Organization Name": "ACME BEHAVIORAL",
                        "Provider Other Organization Name Type Code": "3",
                    },
                ),
                schema_row(
                    OTHER_NAME_SCHEMA,
                    {"NPI": ORPHAN_NPI, "Provider Other Organization Name": "GHOST LLC"},
                ),
            ],
        ),
        "practice_locations": write_csv(
            directory / PRACTICE_LOCATION_FILE_NAME,
            PRACTICE_LOCATION_SCHEMA.header,
            [
                schema_row(
                    PRACTICE_LOCATION_SCHEMA,
                    {
                        "NPI": NPI_A,
                        "Provider Secondary Practice Location Address- Address Line 1": "9 OAK ST",
                        "Provider Secondary Practice Location Address - City Name": "FRESNO",
                        "Provider Secondary Practice Location Address - State Name": "ca",
                        "Provider Secondary Practice Location Address - Postal Code": "93650",
                        "Provider Secondary Practice Location Address - Telephone Extension": "12",
                    },
                ),
            ],
        ),
        "endpoints": write_csv(
            directory / ENDPOINT_FILE_NAME,
            ENDPOINT_SCHEMA.header,
            [
                schema_row(
                    ENDPOINT_SCHEMA,
                    {
                        "NPI": NPI_A,
                        "Endpoint Type": "DIRECT",
                        "Endpoint Type Description": "Direct Messaging Address",
                        "Endpoint": "jane.smith@direct.example.org",
                        "Affiliation": "N",
                    },
                ),
                schema_row(
                    ENDPOINT_SCHEMA,
                    {
                        "NPI": NPI_B,
                        "Endpoint Type": "FHIR",
                        "Endpoint": "https://fhir.example.org/r4",
                        "Affiliation": "Y",
                        "Affiliation Legal Business Name": "ACME HEALTH SYSTEM",
                        "Affiliation Address City": "NEW YORK",
                        "Affiliation Address State": "ny",
                    },
                ),
            ],
        ),
    }


def make_provider(
    npi: str,
    *,
    entity_type: EntityType | None = EntityType.INDIVIDUAL,
    state: str | None = "CA",
    practice_state: str | None = None,
    codes: Sequence[str] = (FAMILY_MEDICINE,),
    enumerated: date | None = None,
    updated: date | None = None,
    deactivated: date | None = None,
    name: str | None = None,
    primary: bool = True,
) -> ProviderRecord:
    """
    Build a ProviderRecord directly, bypassing file parsing.

    ``name`` is the last name of an individual or the legal business name
    of an organization; ``primary`` marks the first code as primary.
    """
    addresses = [Address(kind=AddressKind.MAILING, city="SPRINGFIELD", state=state)]
    if practice_state is not None:
        addresses.append(Address(kind=AddressKind.PRACTICE, state=practice_state))
    return ProviderRecord(
        npi=Npi(npi),
        entity_type=entity_type,
        person_name=(
            PersonName(last=name or "SMITH", first="JANE")
            if entity_type is EntityType.INDIVIDUAL
            else None
        ),
        organization_name=(
            OrganizationName(name or "ACME CLINIC")
            if entity_type is EntityType.ORGANIZATION
            else None
        ),
        taxonomies=tuple(
            TaxonomyCode(code=code, is_primary=primary and i == 0) for i, code in enumerate(codes)
        ),
        addresses=tuple(addresses),
        enumeration_date=enumerated,
        last_update_date=updated,
        deactivation_date=deactivated,
        deactivation_reason=DeactivationReason.DEATH if deactivated else None,
    )
