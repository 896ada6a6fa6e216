"""
Column tables of the four reference files.

- nucc_taxonomy_*.csv: NUCC taxonomy code set
- othername_pfile_*.csv: additional organization names
- pl_pfile_*.csv: secondary practice locations
- endpoint_pfile_*.csv: electronic endpoints
"""

from nppes.models.identifiers import OTHER_NAME_TYPE_CODES, AddressKind
from nppes.models.records import (
    Address,
    EndpointRecord,
    OtherNameRecord,
    PracticeLocationRecord,
    TaxonomyReference,
)
from nppes.schemas.columns import ColumnSpec, FieldKind, RecordSchema, RowValues

REFERENCE_SCHEMA_VERSION = "1.0.0"

_PL = "Provider Secondary Practice Location Address"


def _upper(value: str | None) -> str | None:
    return value.upper() if value else value


def build_taxonomy(values: RowValues) -> TaxonomyReference:
    return TaxonomyReference(
        code=values["code"].upper(),
        grouping=values["grouping"],
        classification=values["classification"],
        specialization=values["specialization"],
        definition=values["definition"],
        notes=values["notes"],
        display_name=values["display_name"],
        section=values["section"],
    )


def build_other_name(values: RowValues) -> OtherNameRecord:
    return OtherNameRecord(
        npi=values["npi"],
        organization_name=values["organization_name"],
        type_code=values["type_code"],
    )


def build_practice_location(values: RowValues) -> PracticeLocationRecord:
    address = Address(
        kind=AddressKind.PRACTICE,
        line1=values["line1"],
        line2=values["line2"],
        city=values["city"],
        state=_upper(values["state"]),
        postal_code=values["postal_code"],
        country=_upper(values["country"]),
        phone=values["phone"],
        fax=values["fax"],
    )
    return PracticeLocationRecord(
        npi=values["npi"],
        address=address,
        telephone_extension=values["telephone_extension"],
    )


def build_endpoint(values: RowValues) -> EndpointRecord:
    """Build an endpoint record; the affiliation address is kept only when populated."""
    affiliation_address = Address(
        kind=AddressKind.PRACTICE,
        line1=values["affiliation_line1"],
        line2=values["affiliation_line2"],
        city=values["affiliation_city"],
        state=_upper(values["affiliation_state"]),
        postal_code=values["affiliation_postal_code"],
        country=_upper(values["affiliation_country"]),
    )
    return EndpointRecord(
        npi=values["npi"],
        endpoint=values["endpoint"],
        endpoint_type=values["endpoint_type"],
        endpoint_type_description=values["endpoint_type_description"],
        affiliation=values["affiliation"],
        endpoint_description=values["endpoint_description"],
        affiliation_legal_business_name=values["affiliation_legal_business_name"],
        use_code=values["use_code"],
        use_description=values["use_description"],
        other_use_description=values["other_use_description"],
        content_type=values["content_type"],
        content_description=values["content_description"],
        other_content_description=values["other_content_description"],
        affiliation_address=None if affiliation_address.is_empty else affiliation_address,
    )


TAXONOMY_SCHEMA: RecordSchema[TaxonomyReference] = RecordSchema(
    name="nucc_taxonomy",
    version=REFERENCE_SCHEMA_VERSION,
    columns=(
        ColumnSpec("Code", "code", required=True),
        ColumnSpec("Grouping", "grouping"),
        ColumnSpec("Classification", "classification"),
        ColumnSpec("Specialization", "specialization"),
        ColumnSpec("Definition", "definition"),
        ColumnSpec("Notes", "notes"),
        ColumnSpec("Display Name", "display_name"),
        ColumnSpec("Section", "section"),
    ),
    build=build_taxonomy,
)

OTHER_NAME_SCHEMA: RecordSchema[OtherNameRecord] = RecordSchema(
    name="other_name",
    version=REFERENCE_SCHEMA_VERSION,
    columns=(
        ColumnSpec("NPI", "npi", FieldKind.NPI, required=True),
        ColumnSpec("Provider Other Organization Name", "organization_name", required=True),
        ColumnSpec(
            "Provider Other Organization Name Type Code",
            "type_code",
            FieldKind.CODE,
            codes=OTHER_NAME_TYPE_CODES,
        ),
    ),
    build=build_other_name,
)

PRACTICE_LOCATION_SCHEMA: RecordSchema[PracticeLocationRecord] = RecordSchema(
    name="practice_location",
    version=REFERENCE_SCHEMA_VERSION,
    columns=(
        ColumnSpec("NPI", "npi", FieldKind.NPI, required=True),
        # The published header really has these irregular separators.
        ColumnSpec(f"{_PL}- Address Line 1", "line1"),
        ColumnSpec(f"{_PL}-  Address Line 2", "line2"),
        ColumnSpec(f"{_PL} - City Name", "city"),
        ColumnSpec(f"{_PL} - State Name", "state"),
        ColumnSpec(f"{_PL} - Postal Code", "postal_code"),
        ColumnSpec(f"{_PL} - Country Code (If outside U.S.)", "country"),
        ColumnSpec(f"{_PL} - Telephone Number", "phone"),
        ColumnSpec(f"{_PL} - Telephone Extension", "telephone_extension"),
        ColumnSpec("Provider Practice Location Address - Fax Number", "fax"),
    ),
    build=build_practice_location,
)

ENDPOINT_SCHEMA: RecordSchema[EndpointRecord] = RecordSchema(
    name="endpoint",
    version=REFERENCE_SCHEMA_VERSION,
    columns=(
        ColumnSpec("NPI", "npi", FieldKind.NPI, required=True),
        ColumnSpec("Endpoint Type", "endpoint_type"),
        ColumnSpec("Endpoint Type Description", "endpoint_type_description"),
        ColumnSpec("Endpoint", "endpoint", required=True),
        ColumnSpec("Affiliation", "affiliation", FieldKind.FLAG),
        ColumnSpec("Endpoint Description", "endpoint_description"),
        ColumnSpec("Affiliation Legal Business Name", "affiliation_legal_business_name"),
        ColumnSpec("Use Code", "use_code"),
        ColumnSpec("Use Description", "use_description"),
        ColumnSpec("Other Use Description", "other_use_description"),
        ColumnSpec("Content Type", "content_type"),
        ColumnSpec("Content Description", "content_description"),
        ColumnSpec("Other Content Description", "other_content_description"),
        ColumnSpec("Affiliation Address Line One", "affiliation_line1"),
        ColumnSpec("Affiliation Address Line Two", "affiliation_line2"),
        ColumnSpec("Affiliation Address City", "affiliation_city"),
        ColumnSpec("Affiliation Address State", "affiliation_state"),
        ColumnSpec("Affiliation Address Country", "affiliation_country"),
        ColumnSpec("Affiliation Address Postal Code", "affiliation_postal_code"),
    ),
    build=build_endpoint,
)
