"""
FastAPI/ASGI application entrypoint.

Run with: uvicorn wallet_indexer.api_server.app:app --host 0.0.0.0 --port 3001
"""

from wallet_indexer.api_server.server import app

__all__ = ["app"]
