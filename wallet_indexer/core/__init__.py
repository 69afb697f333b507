"""
Core utilities: exceptions and time helpers shared by sources, chain
reader, services, database and API server.
"""

from wallet_indexer.core.batching import chunked
from wallet_indexer.core.clock import iso_to_ms, now_ms, utc_now_iso
from wallet_indexer.core.exceptions import (
    IndexerError,
    InvalidCursorError,
    MissingCredentialError,
    ProviderError,
)

__all__ = [
    "IndexerError",
    "InvalidCursorError",
    "MissingCredentialError",
    "ProviderError",
    "chunked",
    "iso_to_ms",
    "now_ms",
    "utc_now_iso",
]
