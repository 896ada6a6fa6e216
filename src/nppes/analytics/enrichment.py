"""
Join provider taxonomies with the NUCC taxonomy reference.

Enrichment never fails for an unknown code: the descriptive fields of
that taxonomy are simply None.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from nppes.models.identifiers import Npi
from nppes.models.records import ProviderRecord, TaxonomyCode, TaxonomyReference
from nppes.store.provider_store import ProviderStore
from nppes.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class EnrichedTaxonomy:
    """A provider taxonomy slot with reference descriptions."""

    taxonomy: TaxonomyCode
    matched: bool = False
    display_name: str | None = None
    grouping: str | None = None
    classification: str | None = None
    specialization: str | None = None

    @property
    def code(self) -> str:
        return self.taxonomy.code

    @property
    def is_primary(self) -> bool:
        return self.taxonomy.is_primary


@dataclass(frozen=True, slots=True)
class EnrichedProvider:
    """Provider view whose taxonomies carry reference descriptions."""

    provider: ProviderRecord
    taxonomies: tuple[EnrichedTaxonomy, ...]

    @property
    def npi(self) -> Npi:
        return self.provider.npi

    @property
    def primary_taxonomy(self) -> EnrichedTaxonomy | None:
        for taxonomy in self.taxonomies:
            if taxonomy.is_primary:
                return taxonomy
        return None


def describe_taxonomy(
    taxonomy: TaxonomyCode, reference: Mapping[str, TaxonomyReference]
) -> EnrichedTaxonomy:
    """
    Look up one taxonomy code.

    The display name falls back to "Classification, Specialization" when
    the reference row has no display name.
    """
    ref = reference.get(taxonomy.code)
    if ref is None:
        return EnrichedTaxonomy(taxonomy)
    return EnrichedTaxonomy(
        taxonomy,
        matched=True,
        display_name=ref.label,
        grouping=ref.grouping,
        classification=ref.classification,
        specialization=ref.specialization,
    )


def enrich_provider(
    provider: ProviderRecord, reference: Mapping[str, TaxonomyReference]
) -> EnrichedProvider:
    return EnrichedProvider(
        provider=provider,
        taxonomies=tuple(describe_taxonomy(t, reference) for t in provider.taxonomies),
    )


def enrich(
    store: ProviderStore,
    taxonomy: Mapping[str, TaxonomyReference] | None = None,
    providers: Iterable[ProviderRecord] | None = None,
) -> Iterator[EnrichedProvider]:
    """
    Yield enriched views of providers.

    Args:
        store: Provider store.
        taxonomy: Taxonomy reference; defaults to the one attached to the store.
        providers: Providers to enrich (e.g. a query result); defaults to
            every provider in store order.

    Yields:
        One EnrichedProvider per provider.
    """
    reference = taxonomy if taxonomy is not None else store.taxonomy
    if not reference:
        log.warning("No taxonomy reference available, descriptions will be empty")
    for provider in store if providers is None else providers:
        yield enrich_provider(provider, reference)
