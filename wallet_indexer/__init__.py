"""
Wallet indexer: watched-address aggregation and transfer-history indexing.

Collects wallet addresses from three directories (Privy wallets, Bridge
liquidation addresses, a static JSON feed), polls Alchemy for each address's
Ethereum and Base transfers, and persists both to storage behind a small
FastAPI surface. Modular layout: sources, chain reader, services, database,
API server.
"""

__version__ = "0.1.0"
