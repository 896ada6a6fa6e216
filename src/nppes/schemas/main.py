"""
Column table of the main NPPES provider file (npidata_pfile_*.csv).

The file has 330 columns: 47 identity/name/address/status columns,
15 taxonomy slots of 4 columns, 50 other identifier slots of 4 columns,
7 organization/official columns, 15 taxonomy group columns and the
certification date.
"""

from nppes.errors import DataValidationError, ValidationRule
from nppes.models.identifiers import (
    DEACTIVATION_REASON_CODES,
    ENTITY_TYPE_CODES,
    OTHER_NAME_TYPE_CODES,
    SEX_CODES,
    AddressKind,
    EntityType,
    YesNoFlag,
)
from nppes.models.records import (
    Address,
    AuthorizedOfficial,
    OrganizationName,
    OtherIdentifier,
    OtherProviderName,
    PersonName,
    ProviderRecord,
    TaxonomyCode,
)
from nppes.schemas.columns import (
    ColumnSpec,
    FieldKind,
    GroupMember,
    RecordSchema,
    RepeatedGroup,
    RowValues,
)

MAIN_SCHEMA_VERSION = "1.0.0"
TAXONOMY_SLOTS = 15
OTHER_IDENTIFIER_SLOTS = 50

ENTITY_TYPE_COLUMN = "Entity Type Code"
ORGANIZATION_NAME_COLUMN = "Provider Organization Name (Legal Business Name)"
DEACTIVATION_REASON_COLUMN = "NPI Deactivation Reason Code"
PRIMARY_SWITCH_TEMPLATE = "Healthcare Provider Primary Taxonomy Switch_{i}"

TAXONOMY_GROUP = RepeatedGroup(
    name="taxonomies",
    count=TAXONOMY_SLOTS,
    key="code",
    members=(
        GroupMember("Healthcare Provider Taxonomy Code_{i}", "code"),
        GroupMember("Provider License Number_{i}", "license_number"),
        GroupMember("Provider License Number State Code_{i}", "license_state"),
        GroupMember(PRIMARY_SWITCH_TEMPLATE, "primary_switch", FieldKind.FLAG),
        GroupMember("Healthcare Provider Taxonomy Group_{i}", "group"),
    ),
)

OTHER_IDENTIFIER_GROUP = RepeatedGroup(
    name="other_identifiers",
    count=OTHER_IDENTIFIER_SLOTS,
    key="identifier",
    members=(
        GroupMember("Other Provider Identifier_{i}", "identifier"),
        GroupMember("Other Provider Identifier Type Code_{i}", "type_code"),
        GroupMember("Other Provider Identifier State_{i}", "state"),
        GroupMember("Other Provider Identifier Issuer_{i}", "issuer"),
    ),
)

# (header text, field name) of the individual name columns.
_PERSON_NAME_COLUMNS = (
    ("Provider Last Name (Legal Name)", "last_name"),
    ("Provider First Name", "first_name"),
    ("Provider Middle Name", "middle_name"),
    ("Provider Name Prefix Text", "name_prefix"),
    ("Provider Name Suffix Text", "name_suffix"),
    ("Provider Credential Text", "credential"),
)

_ADDRESS_PARTS = ("line1", "line2", "city", "state", "postal_code", "country", "phone", "fax")


def _address_columns(label: str, prefix: str) -> tuple[ColumnSpec, ...]:
    names = (
        f"Provider First Line {label}",
        f"Provider Second Line {label}",
        f"Provider {label} City Name",
        f"Provider {label} State Name",
        f"Provider {label} Postal Code",
        f"Provider {label} Country Code (If outside U.S.)",
        f"Provider {label} Telephone Number",
        f"Provider {label} Fax Number",
    )
    return tuple(
        ColumnSpec(name, f"{prefix}_{part}") for name, part in zip(names, _ADDRESS_PARTS)
    )


MAIN_COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec("NPI", "npi", FieldKind.NPI, required=True),
    ColumnSpec(ENTITY_TYPE_COLUMN, "entity_type", FieldKind.CODE, codes=ENTITY_TYPE_CODES),
    ColumnSpec("Replacement NPI", "replacement_npi", FieldKind.NPI),
    ColumnSpec("Employer Identification Number (EIN)", "ein"),
    ColumnSpec(ORGANIZATION_NAME_COLUMN, "organization_name"),
    *(ColumnSpec(name, field) for name, field in _PERSON_NAME_COLUMNS),
    ColumnSpec("Provider Other Organization Name", "other_organization_name"),
    ColumnSpec(
        "Provider Other Organization Name Type Code",
        "other_organization_name_type",
        FieldKind.CODE,
        codes=OTHER_NAME_TYPE_CODES,
    ),
    ColumnSpec("Provider Other Last Name", "other_last_name"),
    ColumnSpec("Provider Other First Name", "other_first_name"),
    ColumnSpec("Provider Other Middle Name", "other_middle_name"),
    ColumnSpec("Provider Other Name Prefix Text", "other_name_prefix"),
    ColumnSpec("Provider Other Name Suffix Text", "other_name_suffix"),
    ColumnSpec("Provider Other Credential Text", "other_credential"),
    ColumnSpec(
        "Provider Other Last Name Type Code",
        "other_last_name_type",
        FieldKind.CODE,
        codes=OTHER_NAME_TYPE_CODES,
    ),
    *_address_columns("Business Mailing Address", "mailing"),
    *_address_columns("Business Practice Location Address", "practice"),
    ColumnSpec("Provider Enumeration Date", "enumeration_date", FieldKind.DATE),
    ColumnSpec("Last Update Date", "last_update_date", FieldKind.DATE),
    ColumnSpec(
        DEACTIVATION_REASON_COLUMN,
        "deactivation_reason",
        FieldKind.CODE,
        codes=DEACTIVATION_REASON_CODES,
    ),
    ColumnSpec("NPI Deactivation Date", "deactivation_date", FieldKind.DATE),
    ColumnSpec("NPI Reactivation Date", "reactivation_date", FieldKind.DATE),
    ColumnSpec("Provider Sex Code", "sex", FieldKind.CODE, codes=SEX_CODES),
    ColumnSpec("Authorized Official Last Name", "official_last_name"),
    ColumnSpec("Authorized Official First Name", "official_first_name"),
    ColumnSpec("Authorized Official Middle Name", "official_middle_name"),
    ColumnSpec("Authorized Official Title or Position", "official_title"),
    ColumnSpec("Authorized Official Telephone Number", "official_telephone"),
    *TAXONOMY_GROUP.columns("code", "license_number", "license_state", "primary_switch"),
    *OTHER_IDENTIFIER_GROUP.columns(),
    ColumnSpec("Is Sole Proprietor", "is_sole_proprietor", FieldKind.FLAG),
    ColumnSpec("Is Organization Subpart", "is_organization_subpart", FieldKind.FLAG),
    ColumnSpec("Parent Organization LBN", "parent_organization_lbn"),
    ColumnSpec("Parent Organization TIN", "parent_organization_tin"),
    ColumnSpec("Authorized Official Name Prefix Text", "official_name_prefix"),
    ColumnSpec("Authorized Official Name Suffix Text", "official_name_suffix"),
    ColumnSpec("Authorized Official Credential Text", "official_credential"),
    *TAXONOMY_GROUP.columns("group"),
    ColumnSpec("Certification Date", "certification_date", FieldKind.DATE),
)


def _upper(value: str | None) -> str | None:
    return value.upper() if value else value


def _address(values: RowValues, prefix: str, kind: AddressKind) -> Address:
    parts = {part: values[f"{prefix}_{part}"] for part in _ADDRESS_PARTS}
    parts["state"] = _upper(parts["state"])
    parts["country"] = _upper(parts["country"])
    return Address(kind=kind, **parts)


def _taxonomies(slots: list[RowValues]) -> tuple[TaxonomyCode, ...]:
    taxonomies = []
    primary_slot: int | None = None
    for slot in slots:
        is_primary = slot["primary_switch"] is YesNoFlag.YES
        if is_primary:
            if primary_slot is not None:
                column = PRIMARY_SWITCH_TEMPLATE.format(i=slot["slot"])
                msg = f"more than one primary taxonomy (slots {primary_slot} and {slot['slot']})"
                raise DataValidationError(column, msg, ValidationRule.INVARIANT, "Y")
            primary_slot = slot["slot"]
        taxonomies.append(
            TaxonomyCode(
                code=slot["code"].upper(),
                license_number=slot["license_number"],
                license_state=_upper(slot["license_state"]),
                is_primary=is_primary,
                group=slot["group"],
            )
        )
    return tuple(taxonomies)


def _check_name_exclusivity(values: RowValues, entity_type: EntityType | None) -> None:
    if entity_type is EntityType.ORGANIZATION:
        for column, field in _PERSON_NAME_COLUMNS:
            if values[field] is not None:
                msg = "organization provider populates an individual name column"
                raise DataValidationError(
                    column, msg, ValidationRule.INVARIANT, values[field]
                )
    elif entity_type is EntityType.INDIVIDUAL and values["organization_name"] is not None:
        msg = "individual provider populates the organization name column"
        raise DataValidationError(
            ORGANIZATION_NAME_COLUMN,
            msg,
            ValidationRule.INVARIANT,
            values["organization_name"],
        )


def build_provider(values: RowValues) -> ProviderRecord:
    """
    Assemble a ``ProviderRecord`` from converted main-file values.

    Args:
        values: Converted values of one row.

    Returns:
        The provider record.

    Raises:
        DataValidationError: If a cross-column rule is violated.
    """
    entity_type = values["entity_type"]
    deactivation_date = values["deactivation_date"]

    # Deactivated NPIs are published with their entity type blanked.
    if entity_type is None and deactivation_date is None:
        raise DataValidationError(
            ENTITY_TYPE_COLUMN,
            "entity type is required for active providers",
            ValidationRule.MISSING_REQUIRED,
        )
    if deactivation_date is not None and values["deactivation_reason"] is None:
        raise DataValidationError(
            DEACTIVATION_REASON_COLUMN,
            "deactivation date present without a deactivation reason",
            ValidationRule.INVARIANT,
        )
    _check_name_exclusivity(values, entity_type)

    person = PersonName(
        last=values["last_name"],
        first=values["first_name"],
        middle=values["middle_name"],
        prefix=values["name_prefix"],
        suffix=values["name_suffix"],
        credential=values["credential"],
    )
    organization = values["organization_name"]

    other_person = PersonName(
        last=values["other_last_name"],
        first=values["other_first_name"],
        middle=values["other_middle_name"],
        prefix=values["other_name_prefix"],
        suffix=values["other_name_suffix"],
        credential=values["other_credential"],
    )
    other_name = None
    if values["other_organization_name"] is not None or not other_person.is_empty:
        other_name = OtherProviderName(
            organization_name=values["other_organization_name"],
            organization_name_type=values["other_organization_name_type"],
            person=None if other_person.is_empty else other_person,
            last_name_type=values["other_last_name_type"],
        )

    official_name = PersonName(
        last=values["official_last_name"],
        first=values["official_first_name"],
        middle=values["official_middle_name"],
        prefix=values["official_name_prefix"],
        suffix=values["official_name_suffix"],
        credential=values["official_credential"],
    )
    official = None
    if not official_name.is_empty or values["official_title"] or values["official_telephone"]:
        official = AuthorizedOfficial(
            name=official_name,
            title=values["official_title"],
            telephone=values["official_telephone"],
        )

    addresses = [_address(values, "mailing", AddressKind.MAILING)]
    practice = _address(values, "practice", AddressKind.PRACTICE)
    if not practice.is_empty:
        addresses.append(practice)

    return ProviderRecord(
        npi=values["npi"],
        entity_type=entity_type,
        person_name=None if person.is_empty else person,
        organization_name=OrganizationName(organization) if organization else None,
        taxonomies=_taxonomies(values["taxonomies"]),
        addresses=tuple(addresses),
        enumeration_date=values["enumeration_date"],
        last_update_date=values["last_update_date"],
        deactivation_date=deactivation_date,
        deactivation_reason=values["deactivation_reason"],
        reactivation_date=values["reactivation_date"],
        replacement_npi=values["replacement_npi"],
        ein=values["ein"],
        sex=values["sex"],
        other_name=other_name,
        authorized_official=official,
        other_identifiers=tuple(
            OtherIdentifier(
                identifier=slot["identifier"],
                type_code=slot["type_code"],
                state=_upper(slot["state"]),
                issuer=slot["issuer"],
            )
            for slot in values["other_identifiers"]
        ),
        is_sole_proprietor=values["is_sole_proprietor"],
        is_organization_subpart=values["is_organization_subpart"],
        parent_organization_lbn=values["parent_organization_lbn"],
        parent_organization_tin=values["parent_organization_tin"],
        certification_date=values["certification_date"],
    )


MAIN_SCHEMA: RecordSchema[ProviderRecord] = RecordSchema(
    name="npi_main",
    version=MAIN_SCHEMA_VERSION,
    columns=MAIN_COLUMNS,
    build=build_provider,
    groups=(TAXONOMY_GROUP, OTHER_IDENTIFIER_GROUP),
)
