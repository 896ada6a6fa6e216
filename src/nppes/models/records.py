"""
Immutable record types built from NPPES rows.

Each record is constructed once from a single source row and never
modified afterwards.
"""

from dataclasses import dataclass
from datetime import date

from nppes.models.identifiers import (
    AddressKind,
    DeactivationReason,
    EntityType,
    Npi,
    OtherNameType,
    SexCode,
    YesNoFlag,
)


@dataclass(frozen=True, slots=True)
class Address:
    """Postal address with phone and fax."""

    kind: AddressKind
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    phone: str | None = None
    fax: str | None = None

    def single_line(self) -> str:
        """Render the address as one comma-separated line."""
        street = ", ".join(part for part in (self.line1, self.line2) if part)
        region = " ".join(part for part in (self.state, self.postal_code) if part)
        parts = [street, self.city, region]
        if self.country and self.country != "US":
            parts.append(self.country)
        return ", ".join(part for part in parts if part)

    @property
    def is_empty(self) -> bool:
        return not any(
            (
                self.line1,
                self.line2,
                self.city,
                self.state,
                self.postal_code,
                self.country,
                self.phone,
                self.fax,
            )
        )


@dataclass(frozen=True, slots=True)
class PersonName:
    """Name of an individual provider or official."""

    last: str | None = None
    first: str | None = None
    middle: str | None = None
    prefix: str | None = None
    suffix: str | None = None
    credential: str | None = None

    def full(self) -> str:
        parts = (self.prefix, self.first, self.middle, self.last, self.suffix)
        name = " ".join(part for part in parts if part)
        if self.credential:
            name = f"{name}, {self.credential}" if name else self.credential
        return name

    @property
    def is_empty(self) -> bool:
        return not any(
            (self.last, self.first, self.middle, self.prefix, self.suffix, self.credential)
        )


@dataclass(frozen=True, slots=True)
class OrganizationName:
    legal_business_name: str


@dataclass(frozen=True, slots=True)
class OtherProviderName:
    """The "Provider Other ..." name block of the main file."""

    organization_name: str | None = None
    organization_name_type: OtherNameType | None = None
    person: PersonName | None = None
    last_name_type: OtherNameType | None = None


@dataclass(frozen=True, slots=True)
class AuthorizedOfficial:
    """Person authorized to act for an organization provider."""

    name: PersonName
    title: str | None = None
    telephone: str | None = None


@dataclass(frozen=True, slots=True)
class TaxonomyCode:
    """
    One taxonomy slot of a provider.

    Attributes:
        code: NUCC taxonomy code.
        license_number: License number reported for this taxonomy.
        license_state: State that issued the license.
        is_primary: True only when the primary switch is ``Y``.
        group: Taxonomy group text for the same slot.
    """

    code: str
    license_number: str | None = None
    license_state: str | None = None
    is_primary: bool = False
    group: str | None = None


@dataclass(frozen=True, slots=True)
class OtherIdentifier:
    """Other provider identifier (legacy Medicaid, UPIN and similar)."""

    identifier: str
    type_code: str | None = None
    state: str | None = None
    issuer: str | None = None


@dataclass(frozen=True, slots=True)
class ProviderRecord:
    """
    A provider row of the main NPPES file.

    Exactly one of ``person_name`` and ``organization_name`` is set for
    an active provider, depending on ``entity_type``. Deactivated rows
    are published with most columns blanked, so ``entity_type`` and both
    names may be absent on them.
    """

    npi: Npi
    entity_type: EntityType | None
    person_name: PersonName | None = None
    organization_name: OrganizationName | None = None
    taxonomies: tuple[TaxonomyCode, ...] = ()
    addresses: tuple[Address, ...] = ()
    enumeration_date: date | None = None
    last_update_date: date | None = None
    deactivation_date: date | None = None
    deactivation_reason: DeactivationReason | None = None
    reactivation_date: date | None = None
    replacement_npi: Npi | None = None
    ein: str | None = None
    sex: SexCode | None = None
    other_name: OtherProviderName | None = None
    authorized_official: AuthorizedOfficial | None = None
    other_identifiers: tuple[OtherIdentifier, ...] = ()
    is_sole_proprietor: YesNoFlag | None = None
    is_organization_subpart: YesNoFlag | None = None
    parent_organization_lbn: str | None = None
    parent_organization_tin: str | None = None
    certification_date: date | None = None

    @property
    def is_active(self) -> bool:
        """A provider is active when no deactivation date is present."""
        return self.deactivation_date is None

    @property
    def is_individual(self) -> bool:
        return self.entity_type is EntityType.INDIVIDUAL

    @property
    def is_organization(self) -> bool:
        return self.entity_type is EntityType.ORGANIZATION

    @property
    def mailing_address(self) -> Address | None:
        return self._address(AddressKind.MAILING)

    @property
    def practice_address(self) -> Address | None:
        return self._address(AddressKind.PRACTICE)

    @property
    def state(self) -> str | None:
        """State of the mailing address, falling back to the practice address."""
        for kind in (AddressKind.MAILING, AddressKind.PRACTICE):
            address = self._address(kind)
            if address is not None and address.state:
                return address.state
        return None

    @property
    def primary_taxonomy(self) -> TaxonomyCode | None:
        for taxonomy in self.taxonomies:
            if taxonomy.is_primary:
                return taxonomy
        return None

    @property
    def taxonomy_codes(self) -> tuple[str, ...]:
        return tuple(t.code for t in self.taxonomies)

    @property
    def display_name(self) -> str:
        if self.organization_name is not None:
            return self.organization_name.legal_business_name
        if self.person_name is not None:
            return self.person_name.full()
        return ""

    def _address(self, kind: AddressKind) -> Address | None:
        for address in self.addresses:
            if address.kind is kind:
                return address
        return None


@dataclass(frozen=True, slots=True)
class TaxonomyReference:
    """One row of the NUCC taxonomy code set."""

    code: str
    grouping: str | None = None
    classification: str | None = None
    specialization: str | None = None
    definition: str | None = None
    notes: str | None = None
    display_name: str | None = None
    section: str | None = None

    @property
    def label(self) -> str | None:
        """Display name, else "Classification, Specialization"."""
        if self.display_name:
            return self.display_name
        return ", ".join(p for p in (self.classification, self.specialization) if p) or None


@dataclass(frozen=True, slots=True)
class OtherNameRecord:
    """Additional organization name for an NPI."""

    npi: Npi
    organization_name: str
    type_code: OtherNameType | None = None


@dataclass(frozen=True, slots=True)
class PracticeLocationRecord:
    """Secondary practice location for an NPI."""

    npi: Npi
    address: Address
    telephone_extension: str | None = None


@dataclass(frozen=True, slots=True)
class EndpointRecord:
    """Electronic endpoint (Direct address, FHIR URL, ...) of an NPI."""

    npi: Npi
    endpoint: str
    endpoint_type: str | None = None
    endpoint_type_description: str | None = None
    affiliation: YesNoFlag | None = None
    endpoint_description: str | None = None
    affiliation_legal_business_name: str | None = None
    use_code: str | None = None
    use_description: str | None = None
    other_use_description: str | None = None
    content_type: str | None = None
    content_description: str | None = None
    other_content_description: str | None = None
    affiliation_address: Address | None = None
