"""
FastAPI server: address collection and transaction indexing API.

Lifespan opens the shared Database once, builds every service over it and
stores the container on app.state; shutdown (SIGINT/SIGTERM via uvicorn)
disposes the connection pool. Config via env (see wallet_indexer.config).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse, RedirectResponse

from wallet_indexer import __version__
from wallet_indexer.api_server.addresses import router as addresses_router
from wallet_indexer.api_server.transactions import router as transactions_router
from wallet_indexer.config import get_settings
from wallet_indexer.config.env import mask_secret
from wallet_indexer.core import utc_now_iso
from wallet_indexer.database import Database
from wallet_indexer.indexer_logging import get_logger
from wallet_indexer.services import build_services

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open storage and build services on startup; close storage on shutdown."""
    settings = get_settings()
    db = Database.from_settings(settings)
    await db.open()
    app.state.services = build_services(settings, db)
    logger.info(
        "api_started",
        privy_configured=bool(settings.privy_api_key),
        bridge_configured=bool(settings.bridge_api_key),
        alchemy_api_key=mask_secret(settings.alchemy_api_key) or None,
        json_feed_url=settings.json_feed_url,
    )
    try:
        yield
    finally:
        await db.close()
        app.state.services = None
        logger.info("api_stopped")


app = FastAPI(
    title="Wallet Indexer API",
    description="Watched wallet addresses and their Ethereum/Base transfer history.",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(addresses_router, prefix="/api")
app.include_router(transactions_router, prefix="/api")


@app.get("/api/health")
def health() -> dict[str, str]:
    """Liveness probe: API is up."""
    return {"status": "ok", "timestamp": utc_now_iso()}


# -----------------------------------------------------------------------------
# Legacy paths kept for older clients
# -----------------------------------------------------------------------------


@app.get("/api/list-addresses", include_in_schema=False)
def legacy_list_addresses() -> RedirectResponse:
    return RedirectResponse("/api/addresses/list", status_code=302)


@app.get("/api/list-transactions", include_in_schema=False)
def legacy_list_transactions() -> RedirectResponse:
    return RedirectResponse("/api/transactions/list", status_code=302)


@app.get("/api/list-transactions/{address}", include_in_schema=False)
def legacy_list_address_transactions(address: str) -> RedirectResponse:
    return RedirectResponse(f"/api/transactions/list/{address}", status_code=302)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Any, exc: HTTPException) -> JSONResponse:
    """Consistent JSON error response for HTTPException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
    )
