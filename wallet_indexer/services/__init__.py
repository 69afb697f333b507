"""
Pipeline services: address aggregation and transaction indexing.
"""

from wallet_indexer.services.address_collector import AddressCollector
from wallet_indexer.services.container import (
    ServiceContainer,
    build_chain_reader,
    build_services,
    build_sources,
)
from wallet_indexer.services.transaction_indexer import TransactionIndexer

__all__ = [
    "AddressCollector",
    "ServiceContainer",
    "TransactionIndexer",
    "build_chain_reader",
    "build_services",
    "build_sources",
]
