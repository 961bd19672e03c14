"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    price_feed: str = "binance"  # "binance" or "simulator"
    stream_url: str | None = None  # None -> Binance production endpoint
    reconnect_attempts: int = 0
    database_path: str = "papertrade.db"
    sync_interval: float = 30.0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from environment variables, falling back to defaults.

        - PRICE_FEED                 binance | simulator
        - BINANCE_STREAM_URL         combined stream endpoint
        - BINANCE_RECONNECT_ATTEMPTS 0 disables auto-reconnect
        - PAPERTRADE_DB              SQLite path for the trade ledger
        - TRADE_SYNC_INTERVAL        seconds between ledger -> subscription syncs
        - LOG_LEVEL
        - HOST, PORT                 where uvicorn listens
        """
        env = os.environ
        return cls(
            price_feed=env.get("PRICE_FEED", cls.price_feed).strip().lower() or cls.price_feed,
            stream_url=env.get("BINANCE_STREAM_URL", "").strip() or None,
            reconnect_attempts=int(env.get("BINANCE_RECONNECT_ATTEMPTS", cls.reconnect_attempts)),
            database_path=env.get("PAPERTRADE_DB", "").strip() or cls.database_path,
            sync_interval=float(env.get("TRADE_SYNC_INTERVAL", cls.sync_interval)),
            log_level=env.get("LOG_LEVEL", cls.log_level).upper(),
            host=env.get("HOST", cls.host),
            port=int(env.get("PORT", cls.port)),
        )
