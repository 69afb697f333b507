"""
Bridge adapter: liquidation addresses of Bridge customers.

GET {BRIDGE_API_URL}/customers -> {"data": [{"liquidationAddress", "chain"?}]}
The customer's chain is used when present (unsupported chains are dropped);
customers without one default to ethereum.
"""

from __future__ import annotations

from typing import Any

import httpx

from wallet_indexer.config.settings import DEFAULT_BRIDGE_API_URL
from wallet_indexer.core import utc_now_iso
from wallet_indexer.database.models import Address, AddressSource, Chain, Network, parse_chain
from wallet_indexer.indexer_logging import get_logger
from wallet_indexer.sources.base import SourceClient, error_status, payload_list

logger = get_logger(__name__)


def parse_bridge_customers(payload: Any) -> list[Address]:
    now = utc_now_iso()
    addresses: list[Address] = []
    for customer in payload_list(payload, "data"):
        if not isinstance(customer, dict):
            continue
        value = customer.get("liquidationAddress")
        if not isinstance(value, str) or not value.strip():
            continue
        raw_chain = customer.get("chain")
        chain = Chain.ETHEREUM if raw_chain in (None, "") else parse_chain(raw_chain)
        if chain is None:
            continue
        addresses.append(
            Address(
                address=value,
                source=AddressSource.BRIDGE,
                chain=chain,
                network=Network.MAINNET,
                created_at=now,
                updated_at=now,
            )
        )
    return addresses


class BridgeSource(SourceClient):
    source = AddressSource.BRIDGE

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BRIDGE_API_URL,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url, headers={"x-api-key": api_key}, transport=transport)
        self._api_key = api_key

    async def fetch(self) -> list[Address]:
        logger.info("bridge_fetch_started")
        if not self._api_key:
            logger.warning("bridge_api_key_missing")
            return []
        try:
            async with self._client() as client:
                response = await client.get("/customers")
                response.raise_for_status()
                payload = response.json()
            addresses = parse_bridge_customers(payload)
        except Exception as e:
            logger.error("bridge_fetch_failed", error=str(e), status=error_status(e))
            return []
        logger.info("bridge_fetch_done", count=len(addresses))
        return addresses
