"""
Structured logging for the indexing pipeline.

Every record carries event_type (snake_case), level, an ISO-8601 UTC timestamp and
the emitting module. Pipeline context (address, chain, source) is bound once per
unit of work with bind_address() so source, chain reader and indexer lines for
the same wallet can be joined; context left unset is dropped rather than logged
as null.

No wallet_indexer imports here: config and every other package log through this module.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

PIPELINE_LOGGER = "wallet_indexer.pipeline"
_CONTEXT_KEYS = ("address", "chain", "source")


def _event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event = event_dict.pop("event", None)
    if event is not None:
        event_dict.setdefault("event_type", event)
    return event_dict


def _drop_unset_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in _CONTEXT_KEYS:
        if key in event_dict and event_dict[key] is None:
            del event_dict[key]
    return event_dict


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """(Re)configure structlog. Defaults come from LOG_LEVEL (INFO) and LOG_FORMAT (json)."""
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    output = (fmt or os.getenv("LOG_FORMAT") or "json").strip().lower()
    renderer: Any
    if output == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.format_exc_info,
            _drop_unset_context,
            _event_type,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Module logger:

        logger = get_logger(__name__)
        logger.info("chain_fetch_done", address=addr, chain="base", count=12)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_address(
    address: str,
    *,
    chain: str | None = None,
    source: str | None = None,
) -> structlog.BoundLogger:
    """Logger for one watched address; chain/source are included only when given."""
    return get_logger(PIPELINE_LOGGER).bind(address=address.strip().lower(), chain=chain, source=source)
