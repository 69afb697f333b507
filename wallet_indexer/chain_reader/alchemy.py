"""
Alchemy transfer-history reader: alchemy_getAssetTransfers over JSON-RPC.

For one address on one chain, fetch transfers sent from it and received by
it, and normalize each into a Transaction with a fixed-rate USD valuation.
Ethereum includes internal (contract-call) transfers; Base only supports
external transfers. Transport and provider errors propagate to the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from wallet_indexer.config.env import mask_secret
from wallet_indexer.core import MissingCredentialError, ProviderError, iso_to_ms, now_ms
from wallet_indexer.database.models import (
    AddressSource,
    Chain,
    Transaction,
    TransactionDirection,
)
from wallet_indexer.indexer_logging import bind_address, get_logger

logger = get_logger(__name__)

ALCHEMY_URL_TEMPLATES: dict[Chain, str] = {
    Chain.ETHEREUM: "https://eth-mainnet.g.alchemy.com/v2/{key}",
    Chain.BASE: "https://base-mainnet.g.alchemy.com/v2/{key}",
}

# Fixed conversion rates, not live prices
USD_RATES: dict[Chain, float] = {
    Chain.ETHEREUM: 3000.0,
    Chain.BASE: 3000.0,
}

TRANSFER_CATEGORIES: dict[Chain, tuple[str, ...]] = {
    Chain.ETHEREUM: ("external", "internal"),
    Chain.BASE: ("external",),
}

MAX_COUNT_PER_PAGE = 1000
_RPC_REQUEST_TIMEOUT = 30.0


def _as_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def parse_block_number(value: Any) -> int:
    """blockNum is a hex string ('0x10f2c3'); decimal strings and ints are accepted. 0 on failure."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        try:
            return int(s, 16) if s.lower().startswith("0x") else int(s)
        except ValueError:
            return 0
    return 0


def normalize_transfer(
    transfer: Any,
    address: str,
    chain: Chain,
    direction: TransactionDirection,
    *,
    fetched_at_ms: int | None = None,
) -> Transaction | None:
    """Build a Transaction from one transfer record; None when hash, from or to is missing."""
    if not isinstance(transfer, dict):
        return None
    tx_hash = transfer.get("hash")
    from_address = transfer.get("from")
    to_address = transfer.get("to")
    if not all(isinstance(v, str) and v for v in (tx_hash, from_address, to_address)):
        return None

    value_in_eth = _as_float(transfer.get("value"))
    raw_contract = transfer.get("rawContract")
    raw_value = raw_contract.get("value") if isinstance(raw_contract, dict) else None
    metadata = transfer.get("metadata")
    block_ts = iso_to_ms(metadata.get("blockTimestamp")) if isinstance(metadata, dict) else None

    return Transaction(
        id=tx_hash,
        address=address.lower(),
        source=AddressSource.JSON,  # placeholder; the indexer stamps the owning address's source
        chain=chain,
        direction=direction,
        from_address=from_address.lower(),
        to_address=to_address.lower(),
        value=str(raw_value) if raw_value else "0",
        value_in_eth=value_in_eth,
        value_in_usd=value_in_eth * USD_RATES[chain],
        timestamp=block_ts if block_ts is not None else (fetched_at_ms or now_ms()),
        block_number=parse_block_number(transfer.get("blockNum")),
    )


class ChainReader(ABC):
    """Source of per-chain transfer history for a single watched address."""

    @abstractmethod
    async def fetch_chain_transactions(self, address: str, chain: Chain) -> list[Transaction]:
        ...


class AlchemyChainReader(ChainReader):
    """
    alchemy_getAssetTransfers client for Ethereum and Base mainnet.

    Construction fails fast without an API key. Each query follows pageKey
    for at most max_pages pages of up to 1000 transfers.
    """

    def __init__(
        self,
        api_key: str,
        *,
        max_pages: int = 1,
        timeout_sec: float = _RPC_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            logger.error("alchemy_api_key_missing")
            raise MissingCredentialError("ALCHEMY_API_KEY")
        if max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        self._api_key = api_key
        self._max_pages = max_pages
        self._timeout_sec = timeout_sec
        self._transport = transport
        self._request_id = 0
        logger.info("alchemy_reader_initialized", api_key=mask_secret(api_key), max_pages=max_pages)

    def _url(self, chain: Chain) -> str:
        return ALCHEMY_URL_TEMPLATES[chain].format(key=self._api_key)

    def _next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    def _build_body(self, chain: Chain, filters: dict[str, str], page_key: str | None) -> dict[str, Any]:
        params: dict[str, Any] = {
            "fromBlock": "0x0",
            "toBlock": "latest",
            "category": list(TRANSFER_CATEGORIES[chain]),
            "withMetadata": True,
            "excludeZeroValue": True,
            "maxCount": hex(MAX_COUNT_PER_PAGE),
            **filters,
        }
        if page_key:
            params["pageKey"] = page_key
        return {
            "jsonrpc": "2.0",
            "id": self._next_id(),
            "method": "alchemy_getAssetTransfers",
            "params": [params],
        }

    async def _get_transfers(
        self,
        client: httpx.AsyncClient,
        chain: Chain,
        filters: dict[str, str],
    ) -> list[dict[str, Any]]:
        transfers: list[dict[str, Any]] = []
        page_key: str | None = None
        for _ in range(self._max_pages):
            response = await client.post(self._url(chain), json=self._build_body(chain, filters, page_key))
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise ProviderError("unexpected response body", chain=chain.value)
            error = data.get("error")
            if error:
                message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
                code = error.get("code") if isinstance(error, dict) else None
                raise ProviderError(message, chain=chain.value, code=code)
            result = data.get("result")
            if not isinstance(result, dict):
                raise ProviderError("missing result", chain=chain.value)
            page = result.get("transfers")
            if isinstance(page, list):
                transfers.extend(t for t in page if isinstance(t, dict))
            page_key = result.get("pageKey")
            if not page_key:
                break
        return transfers

    async def fetch_chain_transactions(self, address: str, chain: Chain) -> list[Transaction]:
        chain = Chain(chain)
        key = address.strip().lower()
        log = bind_address(key, chain=chain.value)
        log.info("chain_fetch_started")
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout_sec),
                transport=self._transport,
            ) as client:
                sent = await self._get_transfers(client, chain, {"fromAddress": key})
                received = await self._get_transfers(client, chain, {"toAddress": key})
        except Exception as e:
            log.error("chain_fetch_failed", error=str(e))
            raise

        fetched_at = now_ms()
        transactions: list[Transaction] = []
        for direction, batch in (
            (TransactionDirection.SENT, sent),
            (TransactionDirection.RECEIVED, received),
        ):
            for transfer in batch:
                tx = normalize_transfer(transfer, key, chain, direction, fetched_at_ms=fetched_at)
                if tx is not None:
                    transactions.append(tx)
        log.info("chain_fetch_done", count=len(transactions))
        return transactions
