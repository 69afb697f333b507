"""
Domain records for watched addresses and indexed transactions.

Transient DTOs passed between sources, chain reader, services and the
repository layer; no ORM coupling so storage stays swappable. to_dict()
produces the camelCase shape served by the HTTP API.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AddressSource(str, Enum):
    PRIVY = "privy"
    BRIDGE = "bridge"
    JSON = "json"


class Chain(str, Enum):
    ETHEREUM = "ethereum"
    BASE = "base"


class Network(str, Enum):
    MAINNET = "mainnet"


class TransactionDirection(str, Enum):
    SENT = "sent"
    RECEIVED = "received"


SUPPORTED_CHAINS: tuple[Chain, ...] = (Chain.ETHEREUM, Chain.BASE)


def parse_chain(value: Any) -> Chain | None:
    """Return the Chain for 'ethereum' / 'base' (case-insensitive); None for anything else."""
    if not isinstance(value, str):
        return None
    try:
        return Chain(value.strip().lower())
    except ValueError:
        return None


@dataclass
class Address:
    """Watched address; natural key is the lowercase address string."""

    address: str
    source: AddressSource
    chain: Chain
    network: Network = Network.MAINNET
    created_at: str | None = None
    updated_at: str | None = None
    last_indexed_at: str | None = None
    """ISO timestamp of the last successful index pass; None until indexed."""

    def __post_init__(self) -> None:
        self.address = self.address.strip().lower()
        self.source = AddressSource(self.source)
        self.chain = Chain(self.chain)
        self.network = Network(self.network)

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "source": self.source.value,
            "chain": self.chain.value,
            "network": self.network.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "lastIndexedAt": self.last_indexed_at,
        }


@dataclass
class Transaction:
    """Single transfer relative to one watched address; natural key is the hash (id)."""

    id: str
    address: str
    source: AddressSource
    chain: Chain
    direction: TransactionDirection
    from_address: str
    to_address: str
    value: str
    """Raw value in the smallest unit, as reported by the provider."""
    value_in_eth: float
    value_in_usd: float
    timestamp: int
    """Block timestamp, unix milliseconds."""
    block_number: int
    created_at: str | None = None
    updated_at: str | None = None

    def __post_init__(self) -> None:
        self.source = AddressSource(self.source)
        self.chain = Chain(self.chain)
        self.direction = TransactionDirection(self.direction)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "address": self.address,
            "source": self.source.value,
            "chain": self.chain.value,
            "direction": self.direction.value,
            "fromAddress": self.from_address,
            "toAddress": self.to_address,
            "value": self.value,
            "valueInEth": self.value_in_eth,
            "valueInUsd": self.value_in_usd,
            "timestamp": self.timestamp,
            "blockNumber": self.block_number,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class TransactionPage:
    """One page of transactions plus the offset cursor for the next page (None at end)."""

    transactions: list[Transaction]
    next_cursor: str | None = None


@dataclass
class CollectSummary:
    total: int = 0
    new: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "new": self.new}


@dataclass
class IndexSummary:
    addresses: int = 0
    transactions: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"addresses": self.addresses, "transactions": self.transactions}
