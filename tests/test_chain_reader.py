"""
Pytest tests for the Alchemy chain reader: request shape, normalization, error propagation.
"""

from __future__ import annotations

import json

import httpx
import pytest

from wallet_indexer.chain_reader import AlchemyChainReader, normalize_transfer, parse_block_number
from wallet_indexer.core import MissingCredentialError, ProviderError
from wallet_indexer.database import Chain, TransactionDirection

ADDRESS = "0x1111111111111111111111111111111111111111"
COUNTERPARTY = "0x2222222222222222222222222222222222222222"


def _transfer(tx_hash: str, frm: str, to: str, value: float = 1.5, block: str = "0x10") -> dict:
    return {
        "hash": tx_hash,
        "from": frm,
        "to": to,
        "value": value,
        "blockNum": block,
        "rawContract": {"value": "0x14d1120d7b160000"},
        "metadata": {"blockTimestamp": "2024-01-01T00:00:00.000Z"},
    }


def _rpc_handler(requests: list[dict], sent: list[dict], received: list[dict]):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests.append({"url": str(request.url), "body": body})
        params = body["params"][0]
        transfers = sent if "fromAddress" in params else received
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": {"transfers": transfers}})

    return handler


def test_missing_api_key_raises():
    with pytest.raises(MissingCredentialError, match="ALCHEMY_API_KEY"):
        AlchemyChainReader("")


def test_normalize_transfer_values_in_usd():
    """1.5 ETH at the fixed 3000 rate is 4500 USD."""
    tx = normalize_transfer(
        _transfer("0xHASH", ADDRESS.upper().replace("0X", "0x"), COUNTERPARTY),
        ADDRESS,
        Chain.ETHEREUM,
        TransactionDirection.SENT,
    )
    assert tx is not None
    assert tx.id == "0xHASH"
    assert tx.value_in_eth == 1.5
    assert tx.value_in_usd == 4500.0
    assert tx.value == "0x14d1120d7b160000"
    assert tx.from_address == ADDRESS
    assert tx.block_number == 16
    assert tx.timestamp == 1704067200000


def test_normalize_transfer_defaults():
    transfer = {"hash": "0xh", "from": ADDRESS, "to": COUNTERPARTY, "value": None}
    tx = normalize_transfer(transfer, ADDRESS, Chain.BASE, TransactionDirection.RECEIVED, fetched_at_ms=42)
    assert tx.value == "0"
    assert tx.value_in_eth == 0.0
    assert tx.value_in_usd == 0.0
    assert tx.timestamp == 42
    assert tx.block_number == 0


def test_normalize_transfer_skips_incomplete_records():
    assert normalize_transfer({"hash": "0xh", "from": ADDRESS}, ADDRESS, Chain.ETHEREUM, TransactionDirection.SENT) is None
    assert normalize_transfer("junk", ADDRESS, Chain.ETHEREUM, TransactionDirection.SENT) is None


def test_parse_block_number():
    assert parse_block_number("0x1b4") == 436
    assert parse_block_number("436") == 436
    assert parse_block_number(436) == 436
    assert parse_block_number("garbage") == 0
    assert parse_block_number(None) == 0


async def test_ethereum_queries_sent_then_received_with_internal():
    requests: list[dict] = []
    sent = [_transfer("0xs", ADDRESS, COUNTERPARTY)]
    received = [_transfer("0xr", COUNTERPARTY, ADDRESS, value=0.5)]
    reader = AlchemyChainReader("test-key", transport=httpx.MockTransport(_rpc_handler(requests, sent, received)))

    txs = await reader.fetch_chain_transactions(ADDRESS, Chain.ETHEREUM)

    assert [(t.id, t.direction) for t in txs] == [
        ("0xs", TransactionDirection.SENT),
        ("0xr", TransactionDirection.RECEIVED),
    ]
    assert all(t.address == ADDRESS and t.chain == Chain.ETHEREUM for t in txs)
    assert len(requests) == 2
    assert requests[0]["url"] == "https://eth-mainnet.g.alchemy.com/v2/test-key"
    first = requests[0]["body"]
    assert first["method"] == "alchemy_getAssetTransfers"
    params = first["params"][0]
    assert params["fromAddress"] == ADDRESS
    assert params["category"] == ["external", "internal"]
    assert params["withMetadata"] is True
    assert params["excludeZeroValue"] is True
    assert params["maxCount"] == "0x3e8"
    assert requests[1]["body"]["params"][0]["toAddress"] == ADDRESS


async def test_base_uses_external_only():
    requests: list[dict] = []
    reader = AlchemyChainReader("test-key", transport=httpx.MockTransport(_rpc_handler(requests, [], [])))
    txs = await reader.fetch_chain_transactions(ADDRESS, Chain.BASE)
    assert txs == []
    assert requests[0]["url"] == "https://base-mainnet.g.alchemy.com/v2/test-key"
    assert requests[0]["body"]["params"][0]["category"] == ["external"]


async def test_follows_page_key_up_to_max_pages():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        bodies.append(body)
        params = body["params"][0]
        n = len(bodies)
        return httpx.Response(200, json={"result": {
            "transfers": [_transfer(f"0x{n}", ADDRESS, COUNTERPARTY)] if "fromAddress" in params else [],
            "pageKey": "next" if "pageKey" not in params else None,
        }})

    reader = AlchemyChainReader("k", max_pages=2, transport=httpx.MockTransport(handler))
    txs = await reader.fetch_chain_transactions(ADDRESS, Chain.BASE)
    sent_pages = [b for b in bodies if "fromAddress" in b["params"][0]]
    assert len(sent_pages) == 2
    assert sent_pages[1]["params"][0]["pageKey"] == "next"
    assert [t.id for t in txs] == ["0x1", "0x2"]


async def test_provider_error_payload_propagates():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "invalid params"}})

    reader = AlchemyChainReader("k", transport=httpx.MockTransport(handler))
    with pytest.raises(ProviderError, match="invalid params") as exc_info:
        await reader.fetch_chain_transactions(ADDRESS, Chain.ETHEREUM)
    assert exc_info.value.code == -32602
    assert exc_info.value.chain == "ethereum"


async def test_http_error_propagates():
    reader = AlchemyChainReader("k", transport=httpx.MockTransport(lambda r: httpx.Response(429)))
    with pytest.raises(httpx.HTTPStatusError):
        await reader.fetch_chain_transactions(ADDRESS, Chain.ETHEREUM)
