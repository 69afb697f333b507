"""
Structured logging for the wallet indexer.

JSON logs with timestamp, event_type and per-call context.
Use get_logger() in modules and bind_address() for per-wallet pipeline work.
"""

from wallet_indexer.indexer_logging.logger import bind_address, configure_logging, get_logger

__all__ = ["bind_address", "configure_logging", "get_logger"]
