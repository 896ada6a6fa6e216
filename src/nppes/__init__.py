"""
NPPES: National Plan and Provider Enumeration System data toolkit.

This package ingests the NPPES provider and reference files into typed,
validated records, builds an indexed in-memory provider store, and
provides query, aggregation and enrichment over it.
"""

from importlib.metadata import version

__version__ = version("nppes")

__all__ = ["__version__"]
