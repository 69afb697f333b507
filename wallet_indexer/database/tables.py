"""
SQLAlchemy tables for the two collections: addresses and transactions.

addresses: unique index on address. transactions: primary key on the
transaction hash (id), secondary indexes on address and timestamp.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, Float, Integer, String
from sqlalchemy.orm import declarative_base

from wallet_indexer.database.models import Address, Transaction

Base = declarative_base()


class AddressRow(Base):
    """One row per watched address (lowercase)."""

    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String(64), unique=True, nullable=False, index=True)
    source = Column(String(16), nullable=False, index=True)
    chain = Column(String(16), nullable=False)
    network = Column(String(16), nullable=False)
    created_at = Column(String(40), nullable=False)
    updated_at = Column(String(40), nullable=False)
    last_indexed_at = Column(String(40), nullable=True)

    def to_record(self) -> Address:
        return Address(
            address=self.address,
            source=self.source,
            chain=self.chain,
            network=self.network,
            created_at=self.created_at,
            updated_at=self.updated_at,
            last_indexed_at=self.last_indexed_at,
        )


class TransactionRow(Base):
    """One row per transaction hash; re-seen hashes are updated in place."""

    __tablename__ = "transactions"

    id = Column(String(80), primary_key=True)
    address = Column(String(64), nullable=False, index=True)
    source = Column(String(16), nullable=False)
    chain = Column(String(16), nullable=False)
    direction = Column(String(16), nullable=False, index=True)
    from_address = Column(String(64), nullable=False)
    to_address = Column(String(64), nullable=False)
    value = Column(String(80), nullable=False)  # smallest unit; string avoids precision loss
    value_in_eth = Column(Float, nullable=False)
    value_in_usd = Column(Float, nullable=False)
    timestamp = Column(BigInteger, nullable=False, index=True)  # unix ms
    block_number = Column(BigInteger, nullable=False)
    created_at = Column(String(40), nullable=False)
    updated_at = Column(String(40), nullable=False)

    def assign(self, tx: Transaction, updated_at: str) -> None:
        """Overwrite every mutable field from tx; created_at is left to the caller."""
        self.address = tx.address
        self.source = tx.source.value
        self.chain = tx.chain.value
        self.direction = tx.direction.value
        self.from_address = tx.from_address
        self.to_address = tx.to_address
        self.value = tx.value
        self.value_in_eth = tx.value_in_eth
        self.value_in_usd = tx.value_in_usd
        self.timestamp = tx.timestamp
        self.block_number = tx.block_number
        self.updated_at = updated_at

    def to_record(self) -> Transaction:
        return Transaction(
            id=self.id,
            address=self.address,
            source=self.source,
            chain=self.chain,
            direction=self.direction,
            from_address=self.from_address,
            to_address=self.to_address,
            value=self.value,
            value_in_eth=self.value_in_eth,
            value_in_usd=self.value_in_usd,
            timestamp=self.timestamp,
            block_number=self.block_number,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
