"""SSE streaming endpoint for live price updates."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from .cache import PriceCache
from .models import PriceUpdate

logger = logging.getLogger(__name__)


def create_stream_router(price_cache: PriceCache) -> APIRouter:
    """Create the price routers with a reference to the price cache.

    This factory pattern lets us inject the PriceCache without globals.
    """
    router = APIRouter(prefix="/api", tags=["prices"])

    @router.get("/prices")
    async def get_prices() -> dict:
        """Current price table, keyed by dashboard symbol."""
        return {symbol: update.to_dict() for symbol, update in price_cache.get_all().items()}

    @router.get("/stream/prices")
    async def stream_prices(request: Request) -> StreamingResponse:
        """SSE endpoint for live price updates.

        Pushes the whole price table whenever the cache changes:

            data: {"BTC/USDT": {"symbol": "BTC/USDT", "price": 67123.45, ...}, ...}

        Includes a retry directive so the browser auto-reconnects on
        disconnection (EventSource built-in behavior).
        """
        return StreamingResponse(
            _generate_events(price_cache, request),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
            },
        )

    return router


async def _generate_events(
    price_cache: PriceCache,
    request: Request,
    keepalive: float = 15.0,
) -> AsyncGenerator[str, None]:
    """Yield SSE events, one full price table per batch of cache updates.

    A cache listener wakes the generator; updates that land while an event
    is being written are coalesced into the next one. A comment line goes
    out after `keepalive` idle seconds so proxies keep the connection and a
    gone client is noticed.
    """
    yield "retry: 1000\n\n"

    loop = asyncio.get_running_loop()
    changed = asyncio.Event()

    def on_update(update: PriceUpdate) -> None:
        # Feeds may write from another thread
        loop.call_soon_threadsafe(changed.set)

    unsubscribe = price_cache.subscribe(on_update)
    if len(price_cache):
        changed.set()

    client_ip = request.client.host if request.client else "unknown"
    logger.info("SSE client connected: %s", client_ip)

    try:
        while not await request.is_disconnected():
            try:
                await asyncio.wait_for(changed.wait(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue

            changed.clear()
            data = {symbol: update.to_dict() for symbol, update in price_cache.get_all().items()}
            yield f"data: {json.dumps(data)}\n\n"
        logger.info("SSE client disconnected: %s", client_ip)
    finally:
        unsubscribe()
