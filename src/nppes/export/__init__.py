"""
Export adapters built on the public store and query API.
"""

from nppes.export.frames import counts_frame, providers_frame, write_frame

__all__ = ["counts_frame", "providers_frame", "write_frame"]
