"""
Application settings and environment configuration.

Responsibilities:
- Load configuration from environment variables and the .env file.
- Provide defaults for optional settings; credentials default to empty, which
  each consumer treats as "not configured".
- Expose a typed, immutable Settings object built once at startup and passed
  to the database, sources, chain reader and services.
"""

from __future__ import annotations

from dataclasses import dataclass

from wallet_indexer.config.env import env_float, env_int, env_str, load_indexer_env

DEFAULT_PRIVY_API_URL = "https://auth.privy.io/api/v1"
DEFAULT_BRIDGE_API_URL = "https://api.sandbox.bridge.xyz"
DEFAULT_JSON_FEED_URL = (
    "https://gist.github.com/benbuschmann/18500244ac1e42dacf1d9bd5e88338cd/raw"
)
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///wallet_indexer.db"


@dataclass(frozen=True)
class Settings:
    """Typed service configuration."""

    privy_api_key: str = ""
    privy_api_url: str = DEFAULT_PRIVY_API_URL
    bridge_api_key: str = ""
    bridge_api_url: str = DEFAULT_BRIDGE_API_URL
    alchemy_api_key: str = ""
    alchemy_max_pages: int = 1

    json_feed_url: str = DEFAULT_JSON_FEED_URL
    json_feed_timeout_sec: float = 10.0
    json_feed_cache_ttl_sec: float = 300.0

    database_url: str = DEFAULT_DATABASE_URL
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_pool_timeout_sec: float = 30.0

    index_batch_size: int = 10
    upsert_chunk_size: int = 100

    api_host: str = "0.0.0.0"
    api_port: int = 3001
    log_level: str = "INFO"

    @property
    def has_alchemy_key(self) -> bool:
        return bool(self.alchemy_api_key)


def get_settings() -> Settings:
    """
    Build Settings from the current environment (after loading .env).

    Not cached: callers (app lifespan, CLI) build it once and inject it.
    """
    load_indexer_env()
    return Settings(
        privy_api_key=env_str("PRIVY_API_KEY"),
        privy_api_url=env_str("PRIVY_API_URL", DEFAULT_PRIVY_API_URL).rstrip("/"),
        bridge_api_key=env_str("BRIDGE_API_KEY"),
        bridge_api_url=env_str("BRIDGE_API_URL", DEFAULT_BRIDGE_API_URL).rstrip("/"),
        alchemy_api_key=env_str("ALCHEMY_API_KEY"),
        alchemy_max_pages=max(1, env_int("ALCHEMY_MAX_PAGES", 1)),
        json_feed_url=env_str("JSON_FEED_URL", DEFAULT_JSON_FEED_URL),
        json_feed_timeout_sec=env_float("JSON_FEED_TIMEOUT_SEC", 10.0),
        json_feed_cache_ttl_sec=env_float("JSON_FEED_CACHE_TTL_SEC", 300.0),
        database_url=env_str("DATABASE_URL", DEFAULT_DATABASE_URL),
        db_pool_min_size=max(1, env_int("DB_POOL_MIN_SIZE", 1)),
        db_pool_max_size=max(1, env_int("DB_POOL_MAX_SIZE", 10)),
        db_pool_timeout_sec=env_float("DB_POOL_TIMEOUT_SEC", 30.0),
        index_batch_size=max(1, env_int("INDEX_BATCH_SIZE", 10)),
        upsert_chunk_size=max(1, env_int("UPSERT_CHUNK_SIZE", 100)),
        api_host=env_str("API_HOST", "0.0.0.0"),
        api_port=env_int("API_PORT", 3001),
        log_level=env_str("LOG_LEVEL", "INFO").upper(),
    )
