"""Factory for creating price feeds."""

from __future__ import annotations

import logging

from ..config import Settings
from .cache import PriceCache
from .interface import MarketDataSource

logger = logging.getLogger(__name__)


def create_market_data_source(
    price_cache: PriceCache,
    settings: Settings | None = None,
) -> MarketDataSource:
    """Create the price feed selected by PRICE_FEED.

    - PRICE_FEED=simulator → SimulatorDataSource (offline GBM simulation)
    - anything else        → BinanceStreamSource (live Binance trade stream)

    Returns an unstarted source. Caller must await source.start(symbols).
    """
    settings = settings or Settings.from_env()

    if settings.price_feed == "simulator":
        from .simulator import SimulatorDataSource

        logger.info("Price feed: GBM simulator")
        return SimulatorDataSource(price_cache=price_cache)

    if settings.price_feed != "binance":
        logger.warning("Unknown PRICE_FEED %r, using Binance", settings.price_feed)

    from .binance_client import DEFAULT_STREAM_URL, BinanceStreamSource

    stream_url = settings.stream_url or DEFAULT_STREAM_URL
    logger.info("Price feed: Binance stream (%s)", stream_url)
    return BinanceStreamSource(
        price_cache=price_cache,
        stream_url=stream_url,
        reconnect_attempts=settings.reconnect_attempts,
    )
