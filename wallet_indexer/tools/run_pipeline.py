"""
Run address collection and/or transaction indexing once, without the API.

How to run:
    From project root (with .env configured):
        python -m wallet_indexer.tools.run_pipeline collect
        python -m wallet_indexer.tools.run_pipeline index
        python -m wallet_indexer.tools.run_pipeline all

Required env vars:
    ALCHEMY_API_KEY                  (index / all; without it indexing is skipped)
    PRIVY_API_KEY, BRIDGE_API_KEY    (optional; a missing key empties that source)
    DATABASE_URL                     (default: sqlite+aiosqlite:///wallet_indexer.db)

Output: one JSON object per step on stdout, e.g. {"step": "collect", "total": 3, "new": 1}
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from wallet_indexer.config import get_settings
from wallet_indexer.database import Database
from wallet_indexer.indexer_logging import get_logger
from wallet_indexer.services import build_services

logger = get_logger(__name__)

STEPS = ("collect", "index", "all")


async def run(step: str) -> list[dict[str, Any]]:
    settings = get_settings()
    db = Database.from_settings(settings)
    await db.open()
    results: list[dict[str, Any]] = []
    try:
        services = build_services(settings, db)
        if step in ("collect", "all"):
            collected = await services.collector.collect_addresses()
            results.append({"step": "collect", **collected.to_dict()})
        if step in ("index", "all"):
            indexed = await services.indexer.index_all_addresses()
            results.append({"step": "index", **indexed.to_dict()})
    finally:
        await db.close()
    return results


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Collect watched addresses and/or index their Ethereum/Base transactions.",
    )
    parser.add_argument("step", nargs="?", choices=STEPS, default="all", help="Pipeline step (default: all)")
    args = parser.parse_args()
    try:
        results = asyncio.run(run(args.step))
    except Exception as e:
        logger.exception("run_pipeline_failed", step=args.step, error=str(e))
        print("ERROR:", e, file=sys.stderr)
        return 1
    for result in results:
        print(json.dumps(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
