"""
Pandera schemas for tabular views of the provider store.

These describe the frames produced by ``nppes.export.frames``; they are
not used during ingestion.
"""

import pandera.pandas as pa
from pandera.typing import Series

VALID_ENTITY_TYPE_CODES = ["1", "2"]


class ProviderFrameSchema(pa.DataFrameModel):
    """
    One row per provider.

    Dates are naive datetimes at midnight; missing dates are NaT.
    """

    npi: Series[str] = pa.Field(
        str_matches=r"^\d{10}$",
        unique=True,
        description="National Provider Identifier",
    )
    entity_type: Series[str] = pa.Field(
        isin=VALID_ENTITY_TYPE_CODES,
        nullable=True,
        description="Entity type code (1 individual, 2 organization)",
    )
    name: Series[str] = pa.Field(
        nullable=True,
        description="Organization legal business name or individual full name",
    )
    state: Series[str] = pa.Field(
        nullable=True,
        description="Mailing state, practice state if mailing has none",
    )
    city: Series[str] = pa.Field(nullable=True, description="Mailing city")
    postal_code: Series[str] = pa.Field(nullable=True, description="Mailing postal code")
    primary_taxonomy: Series[str] = pa.Field(
        nullable=True,
        description="Taxonomy code flagged as primary",
    )
    taxonomy_count: Series[int] = pa.Field(
        ge=0,
        le=15,
        description="Number of taxonomy slots populated",
    )
    enumeration_date: Series[pa.DateTime] = pa.Field(nullable=True)
    last_update_date: Series[pa.DateTime] = pa.Field(nullable=True)
    deactivation_date: Series[pa.DateTime] = pa.Field(nullable=True)
    active: Series[bool] = pa.Field(description="True when no deactivation date is present")

    class Config:
        """Schema configuration."""

        name = "ProviderFrameSchema"
        strict = True
        coerce = True


class CountFrameSchema(pa.DataFrameModel):
    """Ranked provider counts per key (state or taxonomy code)."""

    key: Series[str] = pa.Field(unique=True, description="Grouping key")
    count: Series[int] = pa.Field(ge=0, description="Number of providers")

    class Config:
        """Schema configuration."""

        name = "CountFrameSchema"
        strict = True
        coerce = True
