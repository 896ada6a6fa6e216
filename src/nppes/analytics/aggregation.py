"""
Provider counts and top-N rankings.

Rankings order by count descending, ties by ascending key, and use a
bounded heap instead of sorting every key.
"""

import heapq
from collections import Counter
from collections.abc import Mapping

from nppes.analytics.query import ProviderQuery, execute
from nppes.models.identifiers import EntityType
from nppes.store.provider_store import ProviderStore


def count_by_state(
    store: ProviderStore, query: ProviderQuery | None = None
) -> dict[str, int]:
    """
    Count providers per state.

    Args:
        store: Provider store.
        query: Count only providers matching this query.

    Returns:
        Mapping of state to provider count.
    """
    if query is None or query.is_unrestricted:
        return store.state_counts()
    return dict(Counter(r.state for r in execute(store, query) if r.state is not None))


def count_by_taxonomy(
    store: ProviderStore, query: ProviderQuery | None = None
) -> dict[str, int]:
    """
    Count providers per taxonomy code.

    A provider holding several codes counts once for each of them.
    """
    if query is None or query.is_unrestricted:
        return store.taxonomy_counts()
    counts: Counter[str] = Counter()
    for record in execute(store, query):
        counts.update(set(record.taxonomy_codes))
    return dict(counts)


def count_by_entity_type(
    store: ProviderStore, query: ProviderQuery | None = None
) -> dict[EntityType, int]:
    """Count providers per entity type; deactivated rows without one are not counted."""
    if query is None or query.is_unrestricted:
        return store.entity_type_counts()
    return dict(
        Counter(r.entity_type for r in execute(store, query) if r.entity_type is not None)
    )


def top_n(counts: Mapping[str, int], n: int) -> list[tuple[str, int]]:
    """
    Select the N largest counts.

    Args:
        counts: Mapping of key to count.
        n: Number of entries to return; all keys if larger than the
            number of keys, none if zero or negative.

    Returns:
        (key, count) pairs, count descending then key ascending.
    """
    if n <= 0:
        return []
    return heapq.nsmallest(n, counts.items(), key=lambda kv: (-kv[1], kv[0]))


def top_states(
    store: ProviderStore, n: int, query: ProviderQuery | None = None
) -> list[tuple[str, int]]:
    """States with the most providers."""
    return top_n(count_by_state(store, query), n)


def top_taxonomies(
    store: ProviderStore, n: int, query: ProviderQuery | None = None
) -> list[tuple[str, int]]:
    """Taxonomy codes held by the most providers."""
    return top_n(count_by_taxonomy(store, query), n)
