"""
Query, aggregation and enrichment over a provider store.

Everything here reads the store through its public API and never
modifies it.
"""

from nppes.analytics.aggregation import (
    count_by_entity_type,
    count_by_state,
    count_by_taxonomy,
    top_n,
    top_states,
    top_taxonomies,
)
from nppes.analytics.enrichment import EnrichedProvider, EnrichedTaxonomy, enrich
from nppes.analytics.query import ProviderQuery, execute, linear_scan
from nppes.analytics.statistics import DatasetStatistics

__all__ = [
    "DatasetStatistics",
    "EnrichedProvider",
    "EnrichedTaxonomy",
    "ProviderQuery",
    "count_by_entity_type",
    "count_by_state",
    "count_by_taxonomy",
    "enrich",
    "execute",
    "linear_scan",
    "top_n",
    "top_states",
    "top_taxonomies",
]
