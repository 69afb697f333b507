"""
Privy adapter: embedded/linked wallets of every Privy user.

GET {PRIVY_API_URL}/users -> {"data": [{"linkedAccounts": {"wallets": [{"address", "chain"}]}}]}
Keeps ethereum and base wallets; Privy wallets are always mainnet.
"""

from __future__ import annotations

from typing import Any

import httpx

from wallet_indexer.config.settings import DEFAULT_PRIVY_API_URL
from wallet_indexer.core import utc_now_iso
from wallet_indexer.database.models import Address, AddressSource, Network, parse_chain
from wallet_indexer.indexer_logging import get_logger
from wallet_indexer.sources.base import SourceClient, error_status, payload_list

logger = get_logger(__name__)


def parse_privy_users(payload: Any) -> list[Address]:
    now = utc_now_iso()
    addresses: list[Address] = []
    for user in payload_list(payload, "data"):
        if not isinstance(user, dict):
            continue
        linked = user.get("linkedAccounts")
        wallets = linked.get("wallets") if isinstance(linked, dict) else None
        for wallet in wallets or []:
            if not isinstance(wallet, dict):
                continue
            value = wallet.get("address")
            chain = parse_chain(wallet.get("chain"))
            if not isinstance(value, str) or not value.strip() or chain is None:
                continue
            addresses.append(
                Address(
                    address=value,
                    source=AddressSource.PRIVY,
                    chain=chain,
                    network=Network.MAINNET,
                    created_at=now,
                    updated_at=now,
                )
            )
    return addresses


class PrivySource(SourceClient):
    source = AddressSource.PRIVY

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_PRIVY_API_URL,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )
        self._api_key = api_key

    async def fetch(self) -> list[Address]:
        logger.info("privy_fetch_started")
        if not self._api_key:
            logger.warning("privy_api_key_missing")
            return []
        try:
            async with self._client() as client:
                response = await client.get("/users")
                response.raise_for_status()
                payload = response.json()
            addresses = parse_privy_users(payload)
        except Exception as e:
            logger.error("privy_fetch_failed", error=str(e), status=error_status(e))
            return []
        logger.info("privy_fetch_done", count=len(addresses))
        return addresses
