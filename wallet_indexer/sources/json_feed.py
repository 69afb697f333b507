"""
Static JSON feed adapter with conditional GET and a TTL cache.

GET JSON_FEED_URL -> {"addresses": [{"address", "chain", "network"}]}

- While the cached list is younger than the TTL (default 5 minutes) it is
  returned without a request.
- Otherwise the feed is fetched with If-None-Match / If-Modified-Since from
  the previous response; a 304 serves the last fetched list and restarts the TTL.
"""

from __future__ import annotations

import time
from typing import Any, Callable

import httpx

from wallet_indexer.config.settings import DEFAULT_JSON_FEED_URL
from wallet_indexer.core import utc_now_iso
from wallet_indexer.database.models import Address, AddressSource, Network, parse_chain
from wallet_indexer.indexer_logging import get_logger
from wallet_indexer.sources.base import SourceClient, error_status, payload_list

logger = get_logger(__name__)

DEFAULT_FEED_TIMEOUT_SEC = 10.0
DEFAULT_FEED_CACHE_TTL_SEC = 300.0


def parse_feed(payload: Any) -> list[Address]:
    if not isinstance(payload, dict) or not isinstance(payload.get("addresses"), list):
        logger.warning("json_feed_unexpected_shape")
        return []
    now = utc_now_iso()
    addresses: list[Address] = []
    for item in payload_list(payload, "addresses"):
        if not isinstance(item, dict):
            continue
        value = item.get("address")
        chain = parse_chain(item.get("chain"))
        network = item.get("network")
        if not isinstance(value, str) or not value.strip() or chain is None:
            continue
        if network != Network.MAINNET.value:
            continue
        addresses.append(
            Address(
                address=value,
                source=AddressSource.JSON,
                chain=chain,
                network=Network.MAINNET,
                created_at=now,
                updated_at=now,
            )
        )
    return addresses


class JsonFeedSource(SourceClient):
    source = AddressSource.JSON

    def __init__(
        self,
        url: str = DEFAULT_JSON_FEED_URL,
        *,
        timeout_sec: float = DEFAULT_FEED_TIMEOUT_SEC,
        cache_ttl_sec: float = DEFAULT_FEED_CACHE_TTL_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(timeout_sec=timeout_sec, transport=transport)
        self._url = url
        self._cache_ttl_sec = cache_ttl_sec
        self._clock = clock
        self._cached: list[Address] | None = None
        self._cached_at = 0.0
        self._etag: str | None = None
        self._last_modified: str | None = None

    def _cache_fresh(self) -> bool:
        return self._cached is not None and (self._clock() - self._cached_at) < self._cache_ttl_sec

    def _store(self, addresses: list[Address]) -> None:
        self._cached = addresses
        self._cached_at = self._clock()

    def _conditional_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self._etag:
            headers["If-None-Match"] = self._etag
        if self._last_modified:
            headers["If-Modified-Since"] = self._last_modified
        return headers

    async def fetch(self) -> list[Address]:
        logger.info("json_feed_fetch_started")
        if self._cache_fresh():
            logger.debug("json_feed_cache_hit", count=len(self._cached or []))
            return list(self._cached or [])
        try:
            async with self._client() as client:
                response = await client.get(self._url, headers=self._conditional_headers())
            if response.status_code == 304:
                cached = self._cached or []
                logger.debug("json_feed_not_modified", count=len(cached))
                self._store(cached)
                return list(cached)
            response.raise_for_status()
            self._etag = response.headers.get("etag") or self._etag
            self._last_modified = response.headers.get("last-modified") or self._last_modified
            addresses = parse_feed(response.json())
        except Exception as e:
            logger.error("json_feed_fetch_failed", url=self._url, error=str(e), status=error_status(e))
            return []
        self._store(addresses)
        logger.info("json_feed_fetch_done", count=len(addresses))
        return list(addresses)
