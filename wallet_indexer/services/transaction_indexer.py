"""
Transaction indexing over all watched addresses.

- index_address_transactions(): fetch every supported chain concurrently for
  one address, stamp source/updated_at, batch-upsert, then set last_indexed_at.
  Chain-read failures propagate.
- index_all_addresses(): load all addresses, split into batches of
  batch_size, index each batch concurrently with per-address isolation
  (a failed address counts 0 and keeps its last_indexed_at); batches run one
  after another to bound concurrent provider calls. Never raises.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Sequence

from wallet_indexer.chain_reader import ChainReader
from wallet_indexer.core import MissingCredentialError, chunked, utc_now_iso
from wallet_indexer.database import (
    SUPPORTED_CHAINS,
    Address,
    AddressRepository,
    Chain,
    IndexSummary,
    Transaction,
    TransactionRepository,
)
from wallet_indexer.indexer_logging import bind_address, get_logger

logger = get_logger(__name__)

DEFAULT_INDEX_BATCH_SIZE = 10


class TransactionIndexer:
    def __init__(
        self,
        addresses: AddressRepository,
        transactions: TransactionRepository,
        reader: ChainReader | None,
        *,
        chains: Sequence[Chain] = SUPPORTED_CHAINS,
        batch_size: int = DEFAULT_INDEX_BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._addresses = addresses
        self._transactions = transactions
        self._reader = reader
        self._chains = tuple(chains)
        self._batch_size = batch_size

    @property
    def is_configured(self) -> bool:
        """False when no chain reader could be built (transfer-history credential missing)."""
        return self._reader is not None

    async def _fetch_all_chains(self, reader: ChainReader, address: str) -> list[list[Transaction]]:
        results = await asyncio.gather(
            *(reader.fetch_chain_transactions(address, chain) for chain in self._chains),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    async def index_address_transactions(self, address: Address) -> int:
        """Index one address across all chains; returns the number of transactions merged."""
        reader = self._reader
        if reader is None:
            raise MissingCredentialError("ALCHEMY_API_KEY")
        log = bind_address(address.address, source=address.source.value)
        log.debug("address_index_started")

        per_chain = await self._fetch_all_chains(reader, address.address)
        updated_at = utc_now_iso()
        merged = [
            replace(tx, source=address.source, updated_at=updated_at)
            for chain_txs in per_chain
            for tx in chain_txs
        ]

        if merged:
            await self._transactions.batch_upsert(merged)
            log.debug("address_transactions_saved", count=len(merged))
        else:
            log.debug("address_no_transactions")

        await self._addresses.update_last_indexed_at(address.address, utc_now_iso())
        return len(merged)

    async def try_index_address(self, address: Address) -> int:
        """index_address_transactions() with failures logged and counted as 0."""
        try:
            return await self.index_address_transactions(address)
        except Exception as e:
            logger.error("address_index_failed", address=address.address, error=str(e))
            return 0

    async def index_all_addresses(self) -> IndexSummary:
        logger.info("index_all_started")
        if self._reader is None:
            logger.error("index_all_skipped", reason="ALCHEMY_API_KEY is not set")
            return IndexSummary()
        try:
            addresses = await self._addresses.get_all()
            logger.info("index_all_addresses_loaded", count=len(addresses))
            if not addresses:
                logger.warning("index_all_no_addresses")
                return IndexSummary()

            batches = list(chunked(addresses, self._batch_size))
            total = 0
            for number, batch in enumerate(batches, start=1):
                logger.info("index_batch_started", batch=number, batches=len(batches), size=len(batch))
                counts = await asyncio.gather(*(self.try_index_address(a) for a in batch))
                total += sum(counts)

            logger.info("index_all_done", addresses=len(addresses), transactions=total)
            return IndexSummary(addresses=len(addresses), transactions=total)
        except Exception as e:
            logger.exception("index_all_failed", error=str(e))
            return IndexSummary()
