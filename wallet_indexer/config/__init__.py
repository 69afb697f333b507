"""
Configuration management for the wallet indexer.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for all service configuration.
"""

from wallet_indexer.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
