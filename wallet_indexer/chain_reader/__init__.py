"""
Chain reader: transfer history per watched address per chain (Alchemy).
"""

from wallet_indexer.chain_reader.alchemy import (
    USD_RATES,
    AlchemyChainReader,
    ChainReader,
    normalize_transfer,
    parse_block_number,
)

__all__ = [
    "USD_RATES",
    "AlchemyChainReader",
    "ChainReader",
    "normalize_transfer",
    "parse_block_number",
]
