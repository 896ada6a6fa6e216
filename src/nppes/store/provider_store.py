"""
Immutable, indexed collection of provider records.

The store is built once from a completed record collection and optional
reference mappings. All indices are built eagerly at construction and
there is no mutation API, so the store can be shared between threads
without locking.
"""

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from nppes.errors import DuplicateIdentifierError
from nppes.models.identifiers import EntityType, Npi
from nppes.models.records import (
    EndpointRecord,
    OtherNameRecord,
    PracticeLocationRecord,
    ProviderRecord,
    TaxonomyReference,
)
from nppes.utils.logging import get_logger

log = get_logger(__name__)

_EMPTY: frozenset[Npi] = frozenset()


@dataclass(frozen=True)
class ProviderDetails:
    """
    A provider joined with its reference rows.

    ``provider`` is None when reference rows exist for an NPI that is
    not in the main file (or nothing is known about it at all).
    """

    npi: Npi
    provider: ProviderRecord | None
    other_names: tuple[OtherNameRecord, ...] = ()
    practice_locations: tuple[PracticeLocationRecord, ...] = ()
    endpoints: tuple[EndpointRecord, ...] = ()

    @property
    def found(self) -> bool:
        return self.provider is not None


def _freeze_mapping(
    mapping: Mapping[Npi, Sequence[object]] | None,
) -> Mapping[str, tuple]:
    if not mapping:
        return MappingProxyType({})
    return MappingProxyType({npi: tuple(rows) for npi, rows in mapping.items()})


class ProviderStore:
    """
    Read-only provider store with secondary indices.

    Indices:
        - npi -> record
        - state -> NPIs (mailing state, else practice state)
        - taxonomy code -> NPIs (every code held, primary or not)
        - entity type -> NPIs

    Index sets are frozensets; iteration order of results follows the
    order in which records were given to ``build``.
    """

    def __init__(
        self,
        records: tuple[ProviderRecord, ...],
        by_npi: Mapping[str, ProviderRecord],
        positions: Mapping[str, int],
        by_state: Mapping[str, frozenset[Npi]],
        by_taxonomy: Mapping[str, frozenset[Npi]],
        by_entity_type: Mapping[EntityType, frozenset[Npi]],
        taxonomy: Mapping[str, TaxonomyReference],
        other_names: Mapping[str, tuple[OtherNameRecord, ...]],
        practice_locations: Mapping[str, tuple[PracticeLocationRecord, ...]],
        endpoints: Mapping[str, tuple[EndpointRecord, ...]],
    ) -> None:
        """Use ``ProviderStore.build`` instead of calling this directly."""
        self._records = records
        self._by_npi = by_npi
        self._positions = positions
        self._by_state = by_state
        self._by_taxonomy = by_taxonomy
        self._by_entity_type = by_entity_type
        self._taxonomy = taxonomy
        self._other_names = other_names
        self._practice_locations = practice_locations
        self._endpoints = endpoints

    @classmethod
    def build(
        cls,
        records: Iterable[ProviderRecord],
        *,
        taxonomy: Mapping[str, TaxonomyReference] | None = None,
        other_names: Mapping[Npi, Sequence[OtherNameRecord]] | None = None,
        practice_locations: Mapping[Npi, Sequence[PracticeLocationRecord]] | None = None,
        endpoints: Mapping[Npi, Sequence[EndpointRecord]] | None = None,
    ) -> "ProviderStore":
        """
        Build a store and all of its indices.

        Args:
            records: Provider records; their order becomes the store order.
            taxonomy: Taxonomy reference keyed by code.
            other_names: Other names grouped by NPI.
            practice_locations: Secondary practice locations grouped by NPI.
            endpoints: Endpoints grouped by NPI.

        Returns:
            The store.

        Raises:
            DuplicateIdentifierError: If two records share an NPI.
        """
        ordered = tuple(records)
        by_npi: dict[str, ProviderRecord] = {}
        positions: dict[str, int] = {}
        by_state: dict[str, set[Npi]] = {}
        by_taxonomy: dict[str, set[Npi]] = {}
        by_entity_type: dict[EntityType, set[Npi]] = {}

        for position, record in enumerate(ordered):
            npi = record.npi
            if npi in by_npi:
                raise DuplicateIdentifierError(npi)
            by_npi[npi] = record
            positions[npi] = position

            state = record.state
            if state is not None:
                by_state.setdefault(state, set()).add(npi)
            for code in record.taxonomy_codes:
                by_taxonomy.setdefault(code, set()).add(npi)
            if record.entity_type is not None:
                by_entity_type.setdefault(record.entity_type, set()).add(npi)

        store = cls(
            records=ordered,
            by_npi=MappingProxyType(by_npi),
            positions=MappingProxyType(positions),
            by_state=MappingProxyType({k: frozenset(v) for k, v in by_state.items()}),
            by_taxonomy=MappingProxyType({k: frozenset(v) for k, v in by_taxonomy.items()}),
            by_entity_type=MappingProxyType(
                {k: frozenset(v) for k, v in by_entity_type.items()}
            ),
            taxonomy=MappingProxyType(dict(taxonomy or {})),
            other_names=_freeze_mapping(other_names),
            practice_locations=_freeze_mapping(practice_locations),
            endpoints=_freeze_mapping(endpoints),
        )
        log.info(
            "Built provider store",
            providers=len(ordered),
            states=len(by_state),
            taxonomy_codes=len(by_taxonomy),
        )
        return store

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ProviderRecord]:
        return iter(self._records)

    def __contains__(self, npi: object) -> bool:
        return npi in self._by_npi

    @property
    def records(self) -> tuple[ProviderRecord, ...]:
        return self._records

    @property
    def taxonomy(self) -> Mapping[str, TaxonomyReference]:
        """Taxonomy reference attached at build time (may be empty)."""
        return self._taxonomy

    def get(self, npi: str) -> ProviderRecord | None:
        return self._by_npi.get(npi)

    def position(self, npi: Npi) -> int:
        """Index of a record in store order."""
        return self._positions[npi]

    def find_by_state(self, state: str) -> frozenset[Npi]:
        return self._by_state.get(state.strip().upper(), _EMPTY)

    def find_by_taxonomy(self, code: str) -> frozenset[Npi]:
        return self._by_taxonomy.get(code.strip().upper(), _EMPTY)

    def find_by_entity_type(self, entity_type: EntityType) -> frozenset[Npi]:
        return self._by_entity_type.get(entity_type, _EMPTY)

    def states(self) -> tuple[str, ...]:
        return tuple(sorted(self._by_state))

    def taxonomy_codes(self) -> tuple[str, ...]:
        return tuple(sorted(self._by_taxonomy))

    def state_counts(self) -> dict[str, int]:
        return {state: len(npis) for state, npis in self._by_state.items()}

    def taxonomy_counts(self) -> dict[str, int]:
        return {code: len(npis) for code, npis in self._by_taxonomy.items()}

    def entity_type_counts(self) -> dict[EntityType, int]:
        return {kind: len(npis) for kind, npis in self._by_entity_type.items()}

    def in_store_order(self, npis: Iterable[Npi]) -> list[ProviderRecord]:
        """Resolve NPIs to records, sorted by store order."""
        return [self._records[i] for i in sorted(self._positions[n] for n in npis)]

    def other_names(self, npi: str) -> tuple[OtherNameRecord, ...]:
        return self._other_names.get(npi, ())

    def practice_locations(self, npi: str) -> tuple[PracticeLocationRecord, ...]:
        return self._practice_locations.get(npi, ())

    def endpoints(self, npi: str) -> tuple[EndpointRecord, ...]:
        return self._endpoints.get(npi, ())

    def providers_with_other_names(self) -> int:
        return sum(1 for npi in self._other_names if npi in self._by_npi)

    def providers_with_practice_locations(self) -> int:
        return sum(1 for npi in self._practice_locations if npi in self._by_npi)

    def providers_with_endpoints(self) -> int:
        return sum(1 for npi in self._endpoints if npi in self._by_npi)

    def details(self, npi: str) -> ProviderDetails:
        """
        Join a provider with its reference rows.

        Args:
            npi: Identifier to look up (validated).

        Returns:
            ProviderDetails; ``provider`` is None if the NPI is not in the
            main file.

        Raises:
            DataValidationError: If ``npi`` is not a valid NPI.
        """
        key = Npi(npi)
        return ProviderDetails(
            npi=key,
            provider=self._by_npi.get(key),
            other_names=self.other_names(key),
            practice_locations=self.practice_locations(key),
            endpoints=self.endpoints(key),
        )
