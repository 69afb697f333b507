"""
FastAPI router: indexed transactions.

GET  /transactions                      index all addresses, then one page (limit, lastEvaluatedKey, direction)
GET  /transactions/address/{address}    collect addresses, index this address, then its transactions
POST /transactions/index                index all addresses
GET  /transactions/list                 raw storage page, no indexing
GET  /transactions/list/{address}       raw storage read for one address, no indexing
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from wallet_indexer.api_server.dependencies import get_services
from wallet_indexer.core import InvalidCursorError, utc_now_iso
from wallet_indexer.database import Address, AddressSource, Chain, Network
from wallet_indexer.indexer_logging import get_logger
from wallet_indexer.services import ServiceContainer

logger = get_logger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])

DirectionParam = Literal["sent", "received"]


class IndexResponse(BaseModel):
    """POST /transactions/index response."""

    addresses: int = Field(..., description="Addresses considered")
    transactions: int = Field(..., description="Transactions fetched and upserted")


@router.get("")
async def get_transactions(
    limit: int = Query(50, ge=1, le=1000),
    last_evaluated_key: str | None = Query(None, alias="lastEvaluatedKey"),
    direction: DirectionParam | None = None,
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    try:
        summary = await services.indexer.index_all_addresses()
        logger.info(
            "transactions_indexed_before_read",
            addresses=summary.addresses,
            transactions=summary.transactions,
        )
        page = await services.transactions.get_all(limit, last_evaluated_key, direction)
    except InvalidCursorError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception("get_transactions_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to get transactions") from e
    body: dict[str, Any] = {"transactions": [t.to_dict() for t in page.transactions]}
    if page.next_cursor is not None:
        body["lastEvaluatedKey"] = page.next_cursor
    return body


@router.get("/address/{address}")
async def get_address_transactions(
    address: str,
    direction: DirectionParam | None = None,
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    try:
        collected = await services.collector.collect_addresses()
        logger.info("addresses_collected_before_read", total=collected.total, new=collected.new)
        now = utc_now_iso()
        watched = Address(
            address=address,
            source=AddressSource.JSON,
            chain=Chain.ETHEREUM,
            network=Network.MAINNET,
            created_at=now,
            updated_at=now,
        )
        await services.indexer.try_index_address(watched)
        transactions = await services.transactions.get_by_address(watched.address, direction)
    except Exception as e:
        logger.exception("get_address_transactions_failed", address=address, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to get transactions") from e
    return {"transactions": [t.to_dict() for t in transactions]}


@router.post("/index", response_model=IndexResponse)
async def index_transactions(services: ServiceContainer = Depends(get_services)) -> IndexResponse:
    try:
        summary = await services.indexer.index_all_addresses()
    except Exception as e:
        logger.exception("index_transactions_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to index transactions") from e
    return IndexResponse(addresses=summary.addresses, transactions=summary.transactions)


@router.get("/list")
async def list_transactions(
    limit: int = Query(10, ge=1, le=1000),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    logger.info("list_transactions_called", limit=limit)
    try:
        page = await services.transactions.get_all(limit)
    except Exception as e:
        logger.exception("list_transactions_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to list transactions") from e
    return {
        "success": True,
        "count": len(page.transactions),
        "hasMore": page.next_cursor is not None,
        "transactions": [t.to_dict() for t in page.transactions],
    }


@router.get("/list/{address}")
async def list_address_transactions(
    address: str,
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    logger.info("list_address_transactions_called", address=address)
    try:
        transactions = await services.transactions.get_by_address(address)
    except Exception as e:
        logger.exception("list_address_transactions_failed", address=address, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to list transactions for address") from e
    return {
        "success": True,
        "count": len(transactions),
        "address": address,
        "transactions": [t.to_dict() for t in transactions],
    }
