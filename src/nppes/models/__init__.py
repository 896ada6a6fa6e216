"""
Typed, immutable NPPES record model.
"""

from nppes.models.identifiers import (
    AddressKind,
    DeactivationReason,
    EntityType,
    Npi,
    OtherNameType,
    SexCode,
    YesNoFlag,
    npi_checksum_valid,
)
from nppes.models.records import (
    Address,
    AuthorizedOfficial,
    EndpointRecord,
    OrganizationName,
    OtherIdentifier,
    OtherNameRecord,
    OtherProviderName,
    PersonName,
    PracticeLocationRecord,
    ProviderRecord,
    TaxonomyCode,
    TaxonomyReference,
)

__all__ = [
    "Address",
    "AddressKind",
    "AuthorizedOfficial",
    "DeactivationReason",
    "EndpointRecord",
    "EntityType",
    "Npi",
    "OrganizationName",
    "OtherIdentifier",
    "OtherNameRecord",
    "OtherNameType",
    "OtherProviderName",
    "PersonName",
    "PracticeLocationRecord",
    "ProviderRecord",
    "SexCode",
    "TaxonomyCode",
    "TaxonomyReference",
    "YesNoFlag",
    "npi_checksum_valid",
]
