"""PaperTrade backend: FastAPI app wiring the ledger to the live price feed."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import Settings
from .market import PriceCache, SubscriptionSync, create_market_data_source, create_stream_router
from .trades import SQLiteTradeStore, create_trades_router

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # websockets logs every frame at DEBUG
    logging.getLogger("websockets").setLevel(logging.INFO)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app. The price feed follows the ledger's symbols for the app's lifetime."""
    settings = settings or Settings.from_env()

    price_cache = PriceCache()
    store = SQLiteTradeStore(settings.database_path)
    source = create_market_data_source(price_cache, settings)
    sync = SubscriptionSync(source, store.symbols, interval=settings.sync_interval)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await source.start(store.symbols())
        await sync.start()
        logger.info("PaperTrade backend ready")
        try:
            yield
        finally:
            await sync.stop()
            await source.stop()
            store.close()
            logger.info("PaperTrade backend shut down")

    app = FastAPI(title="PaperTrade", lifespan=lifespan)
    app.state.settings = settings
    app.state.price_cache = price_cache
    app.state.store = store
    app.state.source = source

    app.include_router(create_stream_router(price_cache))
    app.include_router(create_trades_router(store, price_cache, on_change=sync.sync))
    return app


def main() -> None:
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
