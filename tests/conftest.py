"""
Pytest fixtures for wallet indexer tests. Uses a temporary SQLite DB (aiosqlite) per test.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from wallet_indexer.chain_reader import ChainReader
from wallet_indexer.database import (
    Address,
    AddressRepository,
    AddressSource,
    Chain,
    Database,
    Transaction,
    TransactionDirection,
    TransactionRepository,
)

WATCHED = "0xAbC0000000000000000000000000000000000001"
OTHER = "0x2222222222222222222222222222222222222222"


@pytest.fixture
async def db(tmp_path):
    """Opened Database over a fresh SQLite file; closed after the test."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'wallet_indexer.db'}")
    await database.open()
    yield database
    await database.close()


@pytest.fixture
def address_repo(db):
    return AddressRepository(db)


@pytest.fixture
def tx_repo(db):
    return TransactionRepository(db)


def build_tx(
    tx_id: str,
    *,
    address: str = WATCHED,
    direction: TransactionDirection = TransactionDirection.SENT,
    chain: Chain = Chain.ETHEREUM,
    timestamp: int = 1_700_000_000_000,
    value_in_eth: float = 1.0,
    created_at: str | None = None,
) -> Transaction:
    return Transaction(
        id=tx_id,
        address=address.lower(),
        source=AddressSource.JSON,
        chain=chain,
        direction=direction,
        from_address=address.lower(),
        to_address=OTHER,
        value="1000000000000000000",
        value_in_eth=value_in_eth,
        value_in_usd=value_in_eth * 3000.0,
        timestamp=timestamp,
        block_number=100,
        created_at=created_at,
    )


def build_address(
    address: str = WATCHED,
    source: AddressSource = AddressSource.JSON,
    chain: Chain = Chain.ETHEREUM,
) -> Address:
    return Address(address=address, source=source, chain=chain)


@pytest.fixture
def make_tx():
    return build_tx


@pytest.fixture
def make_address():
    return build_address


class FakeReader(ChainReader):
    """
    In-memory ChainReader. results[(address, chain)] is a list of Transactions or an
    exception to raise. Records every call and the peak number of calls in flight.
    """

    def __init__(self, results: dict[tuple[str, Chain], Any] | None = None) -> None:
        self.results = results or {}
        self.calls: list[tuple[str, Chain]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_chain_transactions(self, address: str, chain: Chain) -> list[Transaction]:
        self.calls.append((address, chain))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            result = self.results.get((address, chain), [])
            if isinstance(result, BaseException):
                raise result
            return list(result)
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_reader():
    return FakeReader()
