"""
Pytest tests for the Privy, Bridge and JSON feed adapters. HTTP is served by httpx.MockTransport.
"""

from __future__ import annotations

import httpx

from wallet_indexer.database import AddressSource, Chain
from wallet_indexer.sources import (
    BridgeSource,
    JsonFeedSource,
    PrivySource,
    parse_bridge_customers,
    parse_feed,
)

FEED_URL = "https://feed.example.com/addresses.json"

FEED_BODY = {
    "addresses": [
        {"address": "0xAAA", "chain": "ethereum", "network": "mainnet"},
        {"address": "0xBBB", "chain": "base", "network": "mainnet"},
        {"address": "0xCCC", "chain": "polygon", "network": "mainnet"},
        {"address": "0xDDD", "chain": "ethereum", "network": "sepolia"},
    ]
}


async def test_privy_reads_linked_wallets():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={
            "data": [
                {"linkedAccounts": {"wallets": [
                    {"address": "0xAbC1", "chain": "ethereum"},
                    {"address": "0xAbC2", "chain": "base"},
                    {"address": "So1ana", "chain": "solana"},
                ]}},
                {"linkedAccounts": {}},
            ]
        })

    source = PrivySource("privy-key", "https://privy.test/api/v1", transport=httpx.MockTransport(handler))
    addresses = await source.fetch()

    assert [(a.address, a.chain) for a in addresses] == [("0xabc1", Chain.ETHEREUM), ("0xabc2", Chain.BASE)]
    assert all(a.source == AddressSource.PRIVY for a in addresses)
    assert seen[0].url.path == "/api/v1/users"
    assert seen[0].headers["Authorization"] == "Bearer privy-key"


async def test_privy_missing_key_makes_no_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    source = PrivySource("", transport=httpx.MockTransport(handler))
    assert await source.fetch() == []


async def test_privy_http_error_yields_empty():
    source = PrivySource("k", transport=httpx.MockTransport(lambda r: httpx.Response(401, json={"error": "no"})))
    assert await source.fetch() == []


async def test_bridge_reads_liquidation_addresses():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={
            "data": [
                {"liquidationAddress": "0xB1"},
                {"liquidationAddress": "0xB2", "chain": "base"},
                {"liquidationAddress": "0xB3", "chain": "tron"},
                {"id": "no-address"},
            ]
        })

    source = BridgeSource("bridge-key", "https://bridge.test", transport=httpx.MockTransport(handler))
    addresses = await source.fetch()

    assert [(a.address, a.chain) for a in addresses] == [("0xb1", Chain.ETHEREUM), ("0xb2", Chain.BASE)]
    assert all(a.source == AddressSource.BRIDGE for a in addresses)
    assert seen[0].url.path == "/customers"
    assert seen[0].headers["x-api-key"] == "bridge-key"


async def test_bridge_transport_error_yields_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    source = BridgeSource("k", transport=httpx.MockTransport(handler))
    assert await source.fetch() == []


def test_parse_bridge_customers_unexpected_shape():
    assert parse_bridge_customers({"customers": []}) == []
    assert parse_bridge_customers(None) == []


def test_parse_feed_keeps_mainnet_ethereum_and_base():
    addresses = parse_feed(FEED_BODY)
    assert [(a.address, a.chain.value) for a in addresses] == [("0xaaa", "ethereum"), ("0xbbb", "base")]
    assert all(a.source == AddressSource.JSON for a in addresses)
    assert parse_feed({"items": []}) == []


async def test_json_feed_serves_cache_within_ttl():
    now = [0.0]
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=FEED_BODY, headers={"ETag": '"v1"'})

    source = JsonFeedSource(FEED_URL, cache_ttl_sec=300, transport=httpx.MockTransport(handler), clock=lambda: now[0])
    first = await source.fetch()
    now[0] = 120.0
    second = await source.fetch()

    assert len(calls) == 1
    assert [a.address for a in second] == [a.address for a in first] == ["0xaaa", "0xbbb"]


async def test_json_feed_revalidates_after_ttl_and_handles_304():
    now = [0.0]
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if request.headers.get("If-None-Match") == '"v1"':
            return httpx.Response(304)
        return httpx.Response(
            200,
            json=FEED_BODY,
            headers={"ETag": '"v1"', "Last-Modified": "Mon, 01 Jan 2024 00:00:00 GMT"},
        )

    source = JsonFeedSource(FEED_URL, cache_ttl_sec=300, transport=httpx.MockTransport(handler), clock=lambda: now[0])
    await source.fetch()
    now[0] = 301.0
    revalidated = await source.fetch()

    assert len(calls) == 2
    assert calls[1].headers["If-None-Match"] == '"v1"'
    assert calls[1].headers["If-Modified-Since"] == "Mon, 01 Jan 2024 00:00:00 GMT"
    assert [a.address for a in revalidated] == ["0xaaa", "0xbbb"]

    # 304 restarts the TTL
    now[0] = 400.0
    await source.fetch()
    assert len(calls) == 2


async def test_json_feed_failure_yields_empty():
    source = JsonFeedSource(FEED_URL, transport=httpx.MockTransport(lambda r: httpx.Response(500)))
    assert await source.fetch() == []


async def test_json_feed_invalid_json_yields_empty():
    source = JsonFeedSource(
        FEED_URL,
        transport=httpx.MockTransport(lambda r: httpx.Response(200, content=b"<html>not json</html>")),
    )
    assert await source.fetch() == []
