"""
Summary statistics of a provider store.
"""

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any

from nppes.models.identifiers import EntityType
from nppes.store.provider_store import ProviderStore


@dataclass(frozen=True)
class DatasetStatistics:
    """Counts describing a loaded dataset."""

    total_providers: int
    individual_providers: int
    organization_providers: int
    active_providers: int
    inactive_providers: int
    states_represented: int
    unique_taxonomy_codes: int
    providers_with_primary_taxonomy: int
    providers_with_other_names: int
    providers_with_practice_locations: int
    providers_with_endpoints: int
    earliest_enumeration: date | None = None
    latest_enumeration: date | None = None

    @classmethod
    def from_store(cls, store: ProviderStore) -> "DatasetStatistics":
        """Compute statistics in one pass over the store."""
        active = 0
        with_primary = 0
        earliest: date | None = None
        latest: date | None = None
        for record in store:
            if record.is_active:
                active += 1
            if record.primary_taxonomy is not None:
                with_primary += 1
            enumerated = record.enumeration_date
            if enumerated is not None:
                earliest = enumerated if earliest is None else min(earliest, enumerated)
                latest = enumerated if latest is None else max(latest, enumerated)

        by_type = store.entity_type_counts()
        return cls(
            total_providers=len(store),
            individual_providers=by_type.get(EntityType.INDIVIDUAL, 0),
            organization_providers=by_type.get(EntityType.ORGANIZATION, 0),
            active_providers=active,
            inactive_providers=len(store) - active,
            states_represented=len(store.states()),
            unique_taxonomy_codes=len(store.taxonomy_codes()),
            providers_with_primary_taxonomy=with_primary,
            providers_with_other_names=store.providers_with_other_names(),
            providers_with_practice_locations=store.providers_with_practice_locations(),
            providers_with_endpoints=store.providers_with_endpoints(),
            earliest_enumeration=earliest,
            latest_enumeration=latest,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
