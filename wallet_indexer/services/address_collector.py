"""
Address aggregation: run every source, union the results, persist.

Sources are fetched concurrently, each behind its own isolation wrapper, and
concatenated in source order (Privy, Bridge, JSON feed). Each address is then
looked up by key: absent -> inserted and counted as new; present with a
different source -> source updated (the last source to report it wins);
otherwise untouched. collect_addresses() never raises.
"""

from __future__ import annotations

import asyncio
from typing import Sequence

from wallet_indexer.database import Address, AddressRepository, CollectSummary
from wallet_indexer.indexer_logging import get_logger
from wallet_indexer.sources import SourceClient

logger = get_logger(__name__)


class AddressCollector:
    def __init__(self, sources: Sequence[SourceClient], addresses: AddressRepository) -> None:
        self._sources = list(sources)
        self._addresses = addresses

    async def _fetch_isolated(self, source: SourceClient) -> list[Address]:
        try:
            addresses = await source.fetch()
        except Exception as e:
            logger.exception("source_collect_failed", source=source.name, error=str(e))
            return []
        logger.info("source_collected", source=source.name, count=len(addresses))
        return list(addresses)

    async def _save(self, address: Address) -> bool:
        """Persist one observed address; True when it was newly inserted."""
        existing = await self._addresses.get(address.address)
        if existing is None:
            await self._addresses.upsert(address)
            return True
        if existing.source != address.source:
            await self._addresses.update_source(address.address, address.source)
            logger.debug(
                "address_source_changed",
                address=address.address,
                old_source=existing.source.value,
                new_source=address.source.value,
            )
        return False

    async def collect_addresses(self) -> CollectSummary:
        logger.info("address_collection_started", sources=[s.name for s in self._sources])
        try:
            results = await asyncio.gather(*(self._fetch_isolated(s) for s in self._sources))
            all_addresses = [a for batch in results for a in batch]
            logger.info("address_collection_fetched", total=len(all_addresses))
            if not all_addresses:
                logger.warning("address_collection_empty")
                return CollectSummary()

            new_count = 0
            error_count = 0
            for address in all_addresses:
                try:
                    if await self._save(address):
                        new_count += 1
                except Exception as e:
                    logger.error("address_save_failed", address=address.address, error=str(e))
                    error_count += 1
            if error_count:
                logger.warning("address_collection_save_errors", errors=error_count)

            logger.info("address_collection_done", total=len(all_addresses), new=new_count)
            return CollectSummary(total=len(all_addresses), new=new_count)
        except Exception as e:
            logger.exception("address_collection_failed", error=str(e))
            return CollectSummary()

    async def get_all_addresses(self) -> list[Address]:
        return await self._addresses.get_all()
