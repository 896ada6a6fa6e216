"""
Predicate queries over a provider store.

A ``ProviderQuery`` is an immutable description of the predicates; each
``with_*`` method returns a new query. ``execute`` runs it against the
store indices, ``linear_scan`` runs the same predicates record by record
and is the reference result ``execute`` must agree with.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import date

from nppes.models.identifiers import EntityType, Npi
from nppes.models.records import ProviderRecord, TaxonomyReference
from nppes.store.provider_store import ProviderStore

Predicate = Callable[[ProviderRecord], bool]


def _normalize_keys(values: Iterable[str]) -> frozenset[str]:
    return frozenset(v.strip().upper() for v in values if v.strip())


def _normalize_text(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip().casefold() or None


@dataclass(frozen=True)
class ProviderQuery:
    """
    Conjunction of provider predicates.

    Attributes:
        entity_type: Required entity type.
        state: Required state (mailing, else practice).
        states: Provider state must be one of these.
        taxonomy_codes: Provider must hold at least one of these codes.
        active_only: Exclude providers with a deactivation date.
        inactive_only: Keep only providers with a deactivation date.
        enumerated_from: Earliest enumeration date (inclusive).
        enumerated_to: Latest enumeration date (inclusive).
        updated_from: Earliest last-update date (inclusive).
        updated_to: Latest last-update date (inclusive).
        name_contains: Case-insensitive part of the display name.
        specialty: Case-insensitive part of a held taxonomy's reference
            label (display name, else classification and specialization).
        has_primary_taxonomy: Keep only providers with a primary taxonomy.
    """

    entity_type: EntityType | None = None
    state: str | None = None
    states: frozenset[str] = field(default_factory=frozenset)
    taxonomy_codes: frozenset[str] = field(default_factory=frozenset)
    active_only: bool = False
    inactive_only: bool = False
    enumerated_from: date | None = None
    enumerated_to: date | None = None
    updated_from: date | None = None
    updated_to: date | None = None
    name_contains: str | None = None
    specialty: str | None = None
    has_primary_taxonomy: bool = False

    def __post_init__(self) -> None:
        # Index keys are upper-case, text filters case-folded.
        if self.state is not None:
            object.__setattr__(self, "state", self.state.strip().upper() or None)
        object.__setattr__(self, "states", _normalize_keys(self.states))
        object.__setattr__(self, "taxonomy_codes", _normalize_keys(self.taxonomy_codes))
        object.__setattr__(self, "name_contains", _normalize_text(self.name_contains))
        object.__setattr__(self, "specialty", _normalize_text(self.specialty))

    def with_entity_type(self, entity_type: EntityType | None) -> "ProviderQuery":
        return replace(self, entity_type=entity_type)

    def with_state(self, state: str | None) -> "ProviderQuery":
        return replace(self, state=state)

    def with_states(self, *states: str) -> "ProviderQuery":
        """Add states; a provider matches if its state is any of them."""
        return replace(self, states=self.states | frozenset(states))

    def with_taxonomy(self, *codes: str) -> "ProviderQuery":
        """Add taxonomy codes; a provider matches if it holds any of them."""
        return replace(self, taxonomy_codes=self.taxonomy_codes | frozenset(codes))

    def with_active_only(self, active_only: bool = True) -> "ProviderQuery":
        return replace(self, active_only=active_only)

    def with_inactive_only(self, inactive_only: bool = True) -> "ProviderQuery":
        return replace(self, inactive_only=inactive_only)

    def with_name(self, text: str | None) -> "ProviderQuery":
        return replace(self, name_contains=text)

    def with_specialty(self, text: str | None) -> "ProviderQuery":
        return replace(self, specialty=text)

    def with_primary_taxonomy(self, required: bool = True) -> "ProviderQuery":
        return replace(self, has_primary_taxonomy=required)

    def enumerated_between(
        self, start: date | None = None, end: date | None = None
    ) -> "ProviderQuery":
        """
        Restrict the enumeration date to [start, end].

        Providers without an enumeration date never match a bounded range.
        """
        _check_range("Enumeration", start, end)
        return replace(self, enumerated_from=start, enumerated_to=end)

    def updated_between(
        self, start: date | None = None, end: date | None = None
    ) -> "ProviderQuery":
        """Restrict the last-update date to [start, end]."""
        _check_range("Last update", start, end)
        return replace(self, updated_from=start, updated_to=end)

    @property
    def is_unrestricted(self) -> bool:
        return not self.predicates()

    def predicates(
        self, taxonomy: Mapping[str, TaxonomyReference] | None = None
    ) -> list[tuple[str, Predicate]]:
        """
        Named single-record predicates of this query.

        Args:
            taxonomy: Reference used by the specialty predicate; without
                it no provider matches a specialty.
        """
        checks: list[tuple[str, Predicate]] = []
        if self.entity_type is not None:
            entity_type = self.entity_type
            checks.append(("entity_type", lambda r: r.entity_type is entity_type))
        if self.state is not None:
            state = self.state
            checks.append(("state", lambda r: r.state == state))
        if self.states:
            states = self.states
            checks.append(("states", lambda r: r.state in states))
        if self.taxonomy_codes:
            codes = self.taxonomy_codes
            checks.append(
                ("taxonomy", lambda r: any(t.code in codes for t in r.taxonomies))
            )
        checks.extend(self._residual_predicates(taxonomy))
        return checks

    def _residual_predicates(
        self, taxonomy: Mapping[str, TaxonomyReference] | None = None
    ) -> list[tuple[str, Predicate]]:
        """Predicates without an index."""
        checks: list[tuple[str, Predicate]] = []
        if self.active_only:
            checks.append(("active", lambda r: r.deactivation_date is None))
        if self.inactive_only:
            checks.append(("inactive", lambda r: r.deactivation_date is not None))
        if self.enumerated_from is not None or self.enumerated_to is not None:
            start, end = self.enumerated_from, self.enumerated_to
            checks.append(("enumerated", lambda r: _in_range(r.enumeration_date, start, end)))
        if self.updated_from is not None or self.updated_to is not None:
            u_start, u_end = self.updated_from, self.updated_to
            checks.append(("updated", lambda r: _in_range(r.last_update_date, u_start, u_end)))
        if self.has_primary_taxonomy:
            checks.append(("primary_taxonomy", lambda r: r.primary_taxonomy is not None))
        if self.name_contains is not None:
            text = self.name_contains
            checks.append(("name", lambda r: text in r.display_name.casefold()))
        if self.specialty is not None:
            matching = _codes_with_label(taxonomy or {}, self.specialty)
            checks.append(
                ("specialty", lambda r: any(t.code in matching for t in r.taxonomies))
            )
        return checks


def _check_range(label: str, start: date | None, end: date | None) -> None:
    if start is not None and end is not None and start > end:
        msg = f"{label} range start {start} is after end {end}"
        raise ValueError(msg)


def _in_range(value: date | None, start: date | None, end: date | None) -> bool:
    if value is None:
        return False
    if start is not None and value < start:
        return False
    return end is None or value <= end


def _codes_with_label(taxonomy: Mapping[str, TaxonomyReference], text: str) -> frozenset[str]:
    return frozenset(
        code for code, ref in taxonomy.items() if ref.label and text in ref.label.casefold()
    )


def execute(store: ProviderStore, query: ProviderQuery) -> list[ProviderRecord]:
    """
    Run a query against the store indices.

    The smallest indexed candidate set is taken first and intersected with
    the other indexed sets; the survivors are filtered by the residual
    predicates.

    Args:
        store: Provider store; its taxonomy reference resolves specialties.
        query: Predicates to apply.

    Returns:
        Matching records in store order.
    """
    indexed: list[frozenset[Npi]] = []
    if query.entity_type is not None:
        indexed.append(store.find_by_entity_type(query.entity_type))
    if query.state is not None:
        indexed.append(store.find_by_state(query.state))
    if query.states:
        indexed.append(frozenset().union(*(store.find_by_state(s) for s in query.states)))
    if query.taxonomy_codes:
        indexed.append(
            frozenset().union(*(store.find_by_taxonomy(c) for c in query.taxonomy_codes))
        )

    candidates: Iterable[ProviderRecord]
    if indexed:
        indexed.sort(key=len)
        selected = indexed[0]
        for other in indexed[1:]:
            if not selected:
                break
            selected = selected & other
        candidates = store.in_store_order(selected)
    else:
        candidates = store.records

    residual = [check for _, check in query._residual_predicates(store.taxonomy)]
    return [r for r in candidates if all(check(r) for check in residual)]


def linear_scan(
    records: ProviderStore | Iterable[ProviderRecord],
    query: ProviderQuery,
    order: Sequence[str] | None = None,
    *,
    taxonomy: Mapping[str, TaxonomyReference] | None = None,
) -> list[ProviderRecord]:
    """
    Apply a query by testing every record against every predicate.

    Args:
        records: Store or records to scan.
        query: Predicates to apply.
        order: Predicate names in evaluation order (default: declaration order).
        taxonomy: Reference for specialty matching (defaults to the store's).

    Returns:
        Matching records in input order.
    """
    if taxonomy is None and isinstance(records, ProviderStore):
        taxonomy = records.taxonomy
    checks = dict(query.predicates(taxonomy))
    names = list(order) if order is not None else list(checks)
    if sorted(names) != sorted(checks):
        msg = f"Predicate order {names} does not cover query predicates {sorted(checks)}"
        raise ValueError(msg)
    ordered = [checks[name] for name in names]
    return [r for r in records if all(check(r) for check in ordered)]
