"""
Address source adapters.

Three independent directories of watched addresses, each normalized to
Address records (lowercase, mainnet ethereum/base only). Adapters never
raise; failures are logged and yield an empty list.
"""

from wallet_indexer.sources.base import SourceClient
from wallet_indexer.sources.bridge import BridgeSource, parse_bridge_customers
from wallet_indexer.sources.json_feed import JsonFeedSource, parse_feed
from wallet_indexer.sources.privy import PrivySource, parse_privy_users

__all__ = [
    "BridgeSource",
    "JsonFeedSource",
    "PrivySource",
    "SourceClient",
    "parse_bridge_customers",
    "parse_feed",
    "parse_privy_users",
]
