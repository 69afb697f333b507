"""
Request dependencies: the ServiceContainer built by the app lifespan.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from wallet_indexer.services import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    """Dependency: process-wide services stored on app.state at startup."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return services
