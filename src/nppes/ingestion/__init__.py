"""
Data ingestion layer for loading NPPES files into typed records.

All file reading happens through this module so that header validation
and the skip/abort policy are applied at the system boundary.
"""

from nppes.ingestion.parser import parse_batch, parse_row
from nppes.ingestion.pipeline import IngestionPipeline, LoadOptions, LoadReport
from nppes.ingestion.providers import ProviderLoader, load_providers
from nppes.ingestion.reference import (
    EndpointLoader,
    OtherNameLoader,
    PracticeLocationLoader,
    TaxonomyReferenceLoader,
    load_endpoints,
    load_other_names,
    load_practice_locations,
    load_taxonomy_reference,
)

__all__ = [
    "EndpointLoader",
    "IngestionPipeline",
    "LoadOptions",
    "LoadReport",
    "OtherNameLoader",
    "PracticeLocationLoader",
    "ProviderLoader",
    "TaxonomyReferenceLoader",
    "load_endpoints",
    "load_other_names",
    "load_practice_locations",
    "load_providers",
    "load_taxonomy_reference",
    "parse_batch",
    "parse_row",
]
