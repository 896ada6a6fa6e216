"""
In-memory, read-only provider store.
"""

from nppes.store.provider_store import ProviderDetails, ProviderStore

__all__ = ["ProviderDetails", "ProviderStore"]
