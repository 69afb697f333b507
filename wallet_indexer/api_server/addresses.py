"""
FastAPI router: watched addresses.

GET  /addresses          all stored addresses
POST /addresses/collect  run the address aggregator once
GET  /addresses/list     raw storage dump with count
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from wallet_indexer.api_server.dependencies import get_services
from wallet_indexer.indexer_logging import get_logger
from wallet_indexer.services import ServiceContainer

logger = get_logger(__name__)

router = APIRouter(prefix="/addresses", tags=["addresses"])


class CollectResponse(BaseModel):
    """POST /addresses/collect response."""

    total: int = Field(..., description="Addresses reported by all sources (with repeats)")
    new: int = Field(..., description="Addresses inserted for the first time")


@router.get("")
async def get_addresses(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    try:
        addresses = await services.collector.get_all_addresses()
    except Exception as e:
        logger.exception("get_addresses_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to get addresses") from e
    return {"addresses": [a.to_dict() for a in addresses]}


@router.post("/collect", response_model=CollectResponse)
async def collect_addresses(services: ServiceContainer = Depends(get_services)) -> CollectResponse:
    try:
        summary = await services.collector.collect_addresses()
    except Exception as e:
        logger.exception("collect_addresses_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to collect addresses") from e
    return CollectResponse(total=summary.total, new=summary.new)


@router.get("/list")
async def list_addresses(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    logger.info("list_addresses_called")
    try:
        addresses = await services.addresses.get_all()
    except Exception as e:
        logger.exception("list_addresses_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to list addresses") from e
    return {
        "success": True,
        "count": len(addresses),
        "addresses": [a.to_dict() for a in addresses],
    }
