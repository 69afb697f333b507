"""
Service wiring: one Database, repositories, sources, chain reader and services.

Built once by the API lifespan or the CLI and shared by everything that
needs storage; nothing looks these up from module globals.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from wallet_indexer.chain_reader import AlchemyChainReader, ChainReader
from wallet_indexer.config import Settings
from wallet_indexer.database import AddressRepository, Database, TransactionRepository
from wallet_indexer.indexer_logging import get_logger
from wallet_indexer.services.address_collector import AddressCollector
from wallet_indexer.services.transaction_indexer import TransactionIndexer
from wallet_indexer.sources import BridgeSource, JsonFeedSource, PrivySource, SourceClient

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    db: Database
    addresses: AddressRepository
    transactions: TransactionRepository
    collector: AddressCollector
    indexer: TransactionIndexer


def build_sources(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[SourceClient]:
    """Sources in collection order: Privy, Bridge, JSON feed."""
    return [
        PrivySource(settings.privy_api_key, settings.privy_api_url, transport=transport),
        BridgeSource(settings.bridge_api_key, settings.bridge_api_url, transport=transport),
        JsonFeedSource(
            settings.json_feed_url,
            timeout_sec=settings.json_feed_timeout_sec,
            cache_ttl_sec=settings.json_feed_cache_ttl_sec,
            transport=transport,
        ),
    ]


def build_chain_reader(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ChainReader | None:
    """Alchemy reader, or None (indexing disabled) when ALCHEMY_API_KEY is not set."""
    if not settings.has_alchemy_key:
        logger.warning("chain_reader_disabled", reason="ALCHEMY_API_KEY is not set")
        return None
    return AlchemyChainReader(
        settings.alchemy_api_key,
        max_pages=settings.alchemy_max_pages,
        transport=transport,
    )


def build_services(
    settings: Settings,
    db: Database,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ServiceContainer:
    addresses = AddressRepository(db)
    transactions = TransactionRepository(db, chunk_size=settings.upsert_chunk_size)
    collector = AddressCollector(build_sources(settings, transport=transport), addresses)
    indexer = TransactionIndexer(
        addresses,
        transactions,
        build_chain_reader(settings, transport=transport),
        batch_size=settings.index_batch_size,
    )
    return ServiceContainer(
        settings=settings,
        db=db,
        addresses=addresses,
        transactions=transactions,
        collector=collector,
        indexer=indexer,
    )
