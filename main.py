"""
Main entrypoint: FastAPI server for address collection and transaction indexing.

The app lifespan opens storage and builds services; on SIGINT/SIGTERM uvicorn
runs the shutdown half, which closes the connection pool before exit.

Env: API_HOST, API_PORT, LOG_LEVEL, DATABASE_URL, ALCHEMY_API_KEY, etc.

Equivalent: uvicorn wallet_indexer.api_server.app:app --host 0.0.0.0 --port 3001
"""

# Configure structured JSON logging before other imports that may log
from wallet_indexer.indexer_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI server in the main thread."""
    from wallet_indexer.config import get_settings

    settings = get_settings()

    from wallet_indexer.api_server.app import app
    import uvicorn

    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
