"""
Shared HTTP base for address source adapters.

Each adapter builds a short-lived httpx.AsyncClient per fetch with its base
URL, auth headers and timeout. Request/response logging is attached via
event hooks. fetch() never raises: any failure is logged and yields [].
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from wallet_indexer.database.models import Address, AddressSource
from wallet_indexer.indexer_logging import get_logger

logger = get_logger(__name__)

DEFAULT_SOURCE_TIMEOUT_SEC = 30.0


async def _log_request(request: httpx.Request) -> None:
    logger.debug("api_request", method=request.method, url=str(request.url))


async def _log_response(response: httpx.Response) -> None:
    request = response.request
    if response.status_code >= 400:
        logger.error(
            "api_error",
            method=request.method,
            url=str(request.url),
            status=response.status_code,
        )
    else:
        logger.debug("api_response", status=response.status_code, url=str(request.url))


def error_status(exc: BaseException) -> int | None:
    """HTTP status of an httpx error, if it carries a response."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


def payload_list(payload: Any, key: str) -> list[Any]:
    """Return payload[key] when payload is a dict and the value is a list; else []."""
    if not isinstance(payload, dict):
        return []
    value = payload.get(key)
    return value if isinstance(value, list) else []


class SourceClient(ABC):
    """Base for one external directory of watched addresses."""

    source: AddressSource

    def __init__(
        self,
        base_url: str = "",
        *,
        headers: dict[str, str] | None = None,
        timeout_sec: float = DEFAULT_SOURCE_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._timeout_sec = timeout_sec
        self._transport = transport

    @property
    def name(self) -> str:
        return self.source.value

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=httpx.Timeout(self._timeout_sec),
            transport=self._transport,
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )

    @abstractmethod
    async def fetch(self) -> list[Address]:
        """Return normalized mainnet ethereum/base addresses; [] on any failure."""
        ...
