"""
Repositories for watched addresses and indexed transactions.

All writes are idempotent by natural key (address string, transaction hash).
Storage errors propagate to the caller; only "key not found" cases are
logged and treated as no-ops.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from wallet_indexer.core import InvalidCursorError, chunked, utc_now_iso
from wallet_indexer.database.connection import Database
from wallet_indexer.database.models import (
    Address,
    AddressSource,
    Transaction,
    TransactionDirection,
    TransactionPage,
)
from wallet_indexer.database.tables import AddressRow, TransactionRow
from wallet_indexer.indexer_logging import get_logger

logger = get_logger(__name__)

DEFAULT_UPSERT_CHUNK_SIZE = 100
# One retry when an interleaved writer inserted the same hash between our read and commit
_CHUNK_WRITE_ATTEMPTS = 2


def _key(address: str) -> str:
    return address.strip().lower()


def parse_cursor(cursor: str | int | None) -> int:
    """Decode an offset cursor; None or '' means start of data."""
    if cursor is None or cursor == "":
        return 0
    try:
        offset = int(cursor)
    except (TypeError, ValueError):
        raise InvalidCursorError(f"invalid cursor: {cursor!r}") from None
    if offset < 0:
        raise InvalidCursorError(f"invalid cursor: {cursor!r}")
    return offset


class AddressRepository:
    """Watched addresses keyed by lowercase address."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def upsert(self, address: Address) -> Address:
        """
        Insert the address if its key is absent; otherwise return the stored
        record unchanged. Source changes are applied separately via update_source().
        """
        now = utc_now_iso()
        try:
            async with self._db.session() as session:
                existing = await session.scalar(
                    select(AddressRow).where(AddressRow.address == address.address)
                )
                if existing is not None:
                    logger.debug("address_exists", address=address.address)
                    return existing.to_record()
                row = AddressRow(
                    address=address.address,
                    source=address.source.value,
                    chain=address.chain.value,
                    network=address.network.value,
                    created_at=address.created_at or now,
                    updated_at=now,
                    last_indexed_at=address.last_indexed_at,
                )
                session.add(row)
            logger.debug("address_saved", address=address.address, source=address.source.value)
            return row.to_record()
        except IntegrityError:
            # Interleaved insert of the same key; first writer wins.
            stored = await self.get(address.address)
            if stored is None:
                raise
            return stored

    async def get(self, address: str) -> Address | None:
        async with self._db.session() as session:
            row = await session.scalar(
                select(AddressRow).where(AddressRow.address == _key(address))
            )
            return row.to_record() if row is not None else None

    async def get_all(self) -> list[Address]:
        async with self._db.session() as session:
            rows = (await session.scalars(select(AddressRow).order_by(AddressRow.id))).all()
            return [r.to_record() for r in rows]

    async def get_by_source(self, source: AddressSource | str) -> list[Address]:
        source_value = AddressSource(source).value
        async with self._db.session() as session:
            rows = (
                await session.scalars(
                    select(AddressRow)
                    .where(AddressRow.source == source_value)
                    .order_by(AddressRow.id)
                )
            ).all()
            return [r.to_record() for r in rows]

    async def update_source(self, address: str, source: AddressSource | str) -> Address | None:
        """Set source and updated_at; created_at and last_indexed_at are preserved."""
        key = _key(address)
        async with self._db.session() as session:
            row = await session.scalar(select(AddressRow).where(AddressRow.address == key))
            if row is None:
                logger.debug("address_source_update_missing", address=key)
                return None
            row.source = AddressSource(source).value
            row.updated_at = utc_now_iso()
            return row.to_record()

    async def update_last_indexed_at(self, address: str, timestamp: str) -> bool:
        """Stamp last_indexed_at (and updated_at). No-op, logged, if the key does not exist."""
        key = _key(address)
        async with self._db.session() as session:
            row = await session.scalar(select(AddressRow).where(AddressRow.address == key))
            if row is None:
                logger.debug("address_last_indexed_missing", address=key)
                return False
            row.last_indexed_at = timestamp
            row.updated_at = utc_now_iso()
        logger.debug("address_last_indexed_updated", address=key, last_indexed_at=timestamp)
        return True


class TransactionRepository:
    """Transactions keyed by hash; batch upsert in bounded chunks."""

    def __init__(self, db: Database, *, chunk_size: int = DEFAULT_UPSERT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._db = db
        self._chunk_size = chunk_size

    async def batch_upsert(self, transactions: Sequence[Transaction]) -> None:
        """
        Upsert transactions by hash in chunks of chunk_size, one bulk write per chunk.

        Existing rows have every field overwritten (updated_at = batch time) but keep
        their stored created_at; new rows take the incoming created_at or the batch time.
        """
        if not transactions:
            return
        now = utc_now_iso()
        inserted = 0
        updated = 0
        chunks = 0
        for chunk in chunked(transactions, self._chunk_size):
            chunk_inserted, chunk_updated = await self._write_chunk(chunk, now)
            inserted += chunk_inserted
            updated += chunk_updated
            chunks += 1
        logger.debug(
            "transactions_batch_upserted",
            total=len(transactions),
            inserted=inserted,
            updated=updated,
            chunks=chunks,
        )

    async def _write_chunk(self, chunk: Sequence[Transaction], now: str) -> tuple[int, int]:
        for attempt in range(_CHUNK_WRITE_ATTEMPTS):
            try:
                return await self._bulk_write(chunk, now)
            except IntegrityError:
                if attempt + 1 >= _CHUNK_WRITE_ATTEMPTS:
                    raise
                logger.warning("transactions_chunk_conflict_retry", size=len(chunk))
        raise AssertionError("unreachable")

    async def _bulk_write(self, chunk: Sequence[Transaction], now: str) -> tuple[int, int]:
        """Single transaction: read existing keys, then insert or overwrite each record."""
        inserted = 0
        updated = 0
        ids = list({tx.id for tx in chunk})
        async with self._db.session() as session:
            result = await session.scalars(select(TransactionRow).where(TransactionRow.id.in_(ids)))
            rows: dict[str, TransactionRow] = {row.id: row for row in result.all()}
            for tx in chunk:
                row = rows.get(tx.id)
                if row is None:
                    row = TransactionRow(id=tx.id, created_at=tx.created_at or now)
                    row.assign(tx, now)
                    session.add(row)
                    rows[tx.id] = row
                    inserted += 1
                else:
                    row.assign(tx, now)
                    updated += 1
        return inserted, updated

    async def get(self, tx_id: str) -> Transaction | None:
        async with self._db.session() as session:
            row = await session.get(TransactionRow, tx_id)
            return row.to_record() if row is not None else None

    async def get_all(
        self,
        limit: int = 50,
        cursor: str | int | None = None,
        direction: TransactionDirection | str | None = None,
    ) -> TransactionPage:
        """
        Newest-first page of transactions, optionally filtered by direction.

        The cursor is an offset: next_cursor = offset + limit when a full page was
        returned, None when the page was short. Not stable under concurrent inserts.
        """
        if limit <= 0:
            raise ValueError("limit must be positive")
        offset = parse_cursor(cursor)
        stmt = select(TransactionRow)
        if direction is not None:
            stmt = stmt.where(TransactionRow.direction == TransactionDirection(direction).value)
        stmt = (
            stmt.order_by(TransactionRow.timestamp.desc(), TransactionRow.id)
            .offset(offset)
            .limit(limit)
        )
        async with self._db.session() as session:
            rows = (await session.scalars(stmt)).all()
        transactions = [r.to_record() for r in rows]
        next_cursor = str(offset + limit) if len(transactions) == limit else None
        return TransactionPage(transactions=transactions, next_cursor=next_cursor)

    async def get_by_address(
        self,
        address: str,
        direction: TransactionDirection | str | None = None,
    ) -> list[Transaction]:
        stmt = select(TransactionRow).where(TransactionRow.address == _key(address))
        if direction is not None:
            stmt = stmt.where(TransactionRow.direction == TransactionDirection(direction).value)
        stmt = stmt.order_by(TransactionRow.timestamp.desc(), TransactionRow.id)
        async with self._db.session() as session:
            rows = (await session.scalars(stmt)).all()
            return [r.to_record() for r in rows]

    async def count(self) -> int:
        async with self._db.session() as session:
            return int(await session.scalar(select(func.count()).select_from(TransactionRow)) or 0)
