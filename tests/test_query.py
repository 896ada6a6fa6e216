"""Tests for predicate queries over the store."""

import itertools
from datetime import date

import pytest
from factories import (
    FAMILY_MEDICINE,
    GENERAL_PRACTICE,
    MENTAL_HEALTH_CLINIC,
    TAXONOMY_REFERENCE,
    make_npi,
)

from nppes.analytics.query import ProviderQuery, execute, linear_scan
from nppes.models.identifiers import EntityType
from nppes.models.records import ProviderRecord
from nppes.store.provider_store import ProviderStore

N = [None] + [make_npi(i) for i in range(1, 9)]

QUERIES = [
    ProviderQuery(),
    ProviderQuery(state="CA"),
    ProviderQuery(state="tx"),
    ProviderQuery(entity_type=EntityType.ORGANIZATION),
    ProviderQuery(taxonomy_codes=frozenset({MENTAL_HEALTH_CLINIC})),
    ProviderQuery(taxonomy_codes=frozenset({FAMILY_MEDICINE, GENERAL_PRACTICE})),
    ProviderQuery(state="CA", entity_type=EntityType.INDIVIDUAL),
    ProviderQuery(state="CA", taxonomy_codes=frozenset({MENTAL_HEALTH_CLINIC})),
    ProviderQuery(active_only=True),
    ProviderQuery(state="TX", active_only=True),
    ProviderQuery(enumerated_from=date(2010, 1, 1)),
    ProviderQuery(enumerated_to=date(2012, 6, 1)),
    ProviderQuery(
        entity_type=EntityType.INDIVIDUAL,
        state="CA",
        taxonomy_codes=frozenset({GENERAL_PRACTICE}),
        active_only=True,
        enumerated_from=date(2000, 1, 1),
        enumerated_to=date(2015, 1, 1),
    ),
    ProviderQuery(state="ZZ"),
    ProviderQuery(taxonomy_codes=frozenset({"0000000000X"})),
    ProviderQuery(states=frozenset({"ca", "TX"})),
    ProviderQuery(state="CA", states=frozenset({"NY"})),
    ProviderQuery(inactive_only=True),
    ProviderQuery(active_only=True, inactive_only=True),
    ProviderQuery(updated_from=date(2019, 1, 1)),
    ProviderQuery(updated_to=date(2010, 1, 1), active_only=True),
    ProviderQuery(name_contains="jane"),
    ProviderQuery(name_contains="Health", entity_type=EntityType.ORGANIZATION),
    ProviderQuery(has_primary_taxonomy=True),
    ProviderQuery(specialty="mental"),
    ProviderQuery(
        specialty="physician",
        states=frozenset({"NY", "CA"}),
        has_primary_taxonomy=True,
    ),
    ProviderQuery(specialty="surgery", inactive_only=True),
]


def _npis(records: list[ProviderRecord]) -> list[str]:
    return [r.npi for r in records]


@pytest.fixture
def referenced_store(store: ProviderStore) -> ProviderStore:
    """The shared store with a taxonomy reference attached."""
    return ProviderStore.build(store.records, taxonomy=TAXONOMY_REFERENCE)


class TestProviderQuery:
    """Tests for building queries."""

    def test_builder_returns_new_queries(self) -> None:
        """Test that with_* methods do not modify the original."""
        base = ProviderQuery()
        narrowed = base.with_state("ca").with_taxonomy(FAMILY_MEDICINE)
        assert base.is_unrestricted
        assert narrowed.state == "CA"
        assert narrowed.taxonomy_codes == {FAMILY_MEDICINE}

    def test_taxonomy_codes_accumulate(self) -> None:
        """Test that repeated with_taxonomy calls widen the any-of set."""
        query = ProviderQuery().with_taxonomy("207q00000x").with_taxonomy(GENERAL_PRACTICE, " ")
        assert query.taxonomy_codes == {FAMILY_MEDICINE, GENERAL_PRACTICE}

    def test_blank_state_is_no_filter(self) -> None:
        """Test that an empty state does not restrict."""
        assert ProviderQuery(state="  ").is_unrestricted

    def test_invalid_range(self) -> None:
        """Test that a reversed enumeration range is rejected."""
        with pytest.raises(ValueError, match="after end"):
            ProviderQuery().enumerated_between(date(2020, 1, 1), date(2010, 1, 1))

    def test_text_filters_normalized(self) -> None:
        """Test that name and specialty are trimmed and case-folded."""
        query = ProviderQuery().with_name("  Smith ").with_specialty("Family")
        assert query.name_contains == "smith"
        assert query.specialty == "family"
        assert ProviderQuery().with_name("   ").is_unrestricted

    def test_states_accumulate(self) -> None:
        """Test that repeated with_states calls widen the state set."""
        query = ProviderQuery().with_states("ca").with_states("TX", "")
        assert query.states == {"CA", "TX"}

    def test_invalid_update_range(self) -> None:
        """Test that a reversed last-update range is rejected."""
        with pytest.raises(ValueError, match="Last update range"):
            ProviderQuery().updated_between(date(2020, 1, 1), date(2010, 1, 1))

    def test_predicate_names(self) -> None:
        """Test the names of generated predicates."""
        query = (
            ProviderQuery()
            .with_entity_type(EntityType.INDIVIDUAL)
            .with_state("CA")
            .with_taxonomy(FAMILY_MEDICINE)
            .with_active_only()
            .enumerated_between(date(2000, 1, 1), None)
        )
        assert [name for name, _ in query.predicates()] == [
            "entity_type",
            "state",
            "taxonomy",
            "active",
            "enumerated",
        ]


class TestExecute:
    """Tests for index-backed query execution."""

    def test_unrestricted_returns_all(self, store: ProviderStore) -> None:
        """Test that no predicates return every provider in store order."""
        assert _npis(execute(store, ProviderQuery())) == N[1:]

    def test_state(self, store: ProviderStore) -> None:
        """Test a single state filter."""
        assert _npis(execute(store, ProviderQuery(state="CA"))) == [N[1], N[3], N[5]]

    def test_conjunction(self, store: ProviderStore) -> None:
        """Test that predicates combine with AND."""
        query = ProviderQuery(state="CA", entity_type=EntityType.ORGANIZATION)
        assert _npis(execute(store, query)) == [N[5]]

    def test_taxonomy_any_of(self, store: ProviderStore) -> None:
        """Test that several codes match providers holding any of them."""
        query = ProviderQuery().with_taxonomy(FAMILY_MEDICINE, GENERAL_PRACTICE)
        assert _npis(execute(store, query)) == [N[1], N[3], N[4], N[8]]

    def test_active_only(self, store: ProviderStore) -> None:
        """Test excluding deactivated providers."""
        result = _npis(execute(store, ProviderQuery(active_only=True)))
        assert N[4] not in result
        assert N[7] not in result
        assert len(result) == 6

    def test_enumeration_range(self, store: ProviderStore) -> None:
        """Test inclusive bounds and exclusion of missing dates."""
        query = ProviderQuery().enumerated_between(date(2010, 1, 12), date(2018, 3, 3))
        assert _npis(execute(store, query)) == [N[2], N[3], N[4]]

    def test_no_match(self, store: ProviderStore) -> None:
        """Test that an unknown key yields an empty list."""
        assert execute(store, ProviderQuery(state="ZZ", active_only=True)) == []


    def test_states_any_of(self, store: ProviderStore) -> None:
        """Test that several states match providers in any of them."""
        query = ProviderQuery().with_states("ny", "TX")
        assert _npis(execute(store, query)) == [N[2], N[4], N[6], N[8]]

    def test_states_and_state_combine(self, store: ProviderStore) -> None:
        """Test that a single state narrows a state set."""
        query = ProviderQuery(state="NY").with_states("NY", "CA")
        assert _npis(execute(store, query)) == [N[2], N[8]]

    def test_inactive_only(self, store: ProviderStore) -> None:
        """Test keeping only deactivated providers."""
        assert _npis(execute(store, ProviderQuery().with_inactive_only())) == [N[4], N[7]]

    def test_updated_range(self, store: ProviderStore) -> None:
        """Test inclusive last-update bounds and exclusion of missing dates."""
        query = ProviderQuery().updated_between(date(2019, 4, 1), date(2021, 5, 5))
        assert _npis(execute(store, query)) == [N[3], N[8]]

    def test_name_contains(self, store: ProviderStore) -> None:
        """Test case-insensitive partial name matching."""
        assert _npis(execute(store, ProviderQuery().with_name("jon"))) == [N[3]]
        assert _npis(execute(store, ProviderQuery().with_name(" Valley "))) == [N[5]]

    def test_name_never_matches_nameless_rows(self, store: ProviderStore) -> None:
        """Test that a deactivated row without a name is not matched."""
        result = _npis(execute(store, ProviderQuery().with_name("a")))
        assert N[7] not in result
        assert len(result) == 7

    def test_primary_taxonomy(self, store: ProviderStore) -> None:
        """Test keeping providers with a primary taxonomy."""
        query = ProviderQuery().with_primary_taxonomy()
        assert _npis(execute(store, query)) == [N[1], N[2], N[3], N[4], N[5]]

    def test_specialty(self, referenced_store: ProviderStore) -> None:
        """Test matching the reference label of any held taxonomy."""
        query = ProviderQuery().with_specialty("MENTAL HEALTH")
        assert _npis(execute(referenced_store, query)) == [N[2], N[3], N[5]]
        query = ProviderQuery().with_specialty("physician")
        assert _npis(execute(referenced_store, query)) == [N[1], N[8]]

    def test_specialty_without_reference(self, store: ProviderStore) -> None:
        """Test that no provider matches a specialty when no reference is loaded."""
        assert execute(store, ProviderQuery(specialty="physician")) == []


class TestAgreementWithLinearScan:
    """Index execution must agree with scanning every record."""

    @pytest.mark.parametrize("query", QUERIES)
    def test_execute_equals_linear_scan(
        self, referenced_store: ProviderStore, query: ProviderQuery
    ) -> None:
        """Test that indexed results equal a full scan, same order."""
        assert execute(referenced_store, query) == linear_scan(referenced_store, query)

    @pytest.mark.parametrize("query", QUERIES)
    def test_predicate_order_does_not_matter(
        self, referenced_store: ProviderStore, query: ProviderQuery
    ) -> None:
        """Test every evaluation order of the predicates gives the same result."""
        expected = execute(referenced_store, query)
        names = [name for name, _ in query.predicates()]
        for order in itertools.permutations(names):
            assert linear_scan(referenced_store, query, order) == expected

    def test_incomplete_order_rejected(self, store: ProviderStore) -> None:
        """Test that the order must name every predicate."""
        query = ProviderQuery(state="CA", active_only=True)
        with pytest.raises(ValueError, match="does not cover"):
            linear_scan(store, query, ["state"])

    def test_plain_records_with_reference(self, store: ProviderStore) -> None:
        """Test scanning a record list with an explicit taxonomy reference."""
        query = ProviderQuery(specialty="mental")
        records = list(store.records)
        assert _npis(linear_scan(records, query, taxonomy=TAXONOMY_REFERENCE)) == [
            N[2],
            N[3],
            N[5],
        ]
        assert linear_scan(records, query) == []
