"""Binance combined trade stream client for live crypto prices."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from enum import Enum

import websockets
from websockets.exceptions import WebSocketException

from .cache import PriceCache
from .frames import decode_frame
from .interface import MarketDataSource
from .symbols import build_stream_path, unique_symbols

logger = logging.getLogger(__name__)

DEFAULT_STREAM_URL = "wss://stream.binance.com:9443/stream"


class ConnectionState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class BinanceStreamSource(MarketDataSource):
    """MarketDataSource backed by one Binance combined-stream websocket.

    Subscribes to `<symbol>@trade` for every symbol in the active set through
    a single connection:

        wss://stream.binance.com:9443/stream?streams=btcusdt@trade/ethusdt@trade

    There is no incremental subscribe/unsubscribe: whenever the set of streams
    changes, the current connection is torn down and a fresh one is opened.
    Reordering or re-spelling symbols that map to the same streams does not
    reconnect.

    Every connection gets a generation number. Closing bumps the generation
    before anything is awaited, and frames carrying an older generation are
    ignored, so a superseded connection can never write to the cache.

    A dropped connection is not retried unless `reconnect_attempts` > 0; the
    prices simply go stale until the symbol set changes or refresh() is called.
    """

    def __init__(
        self,
        price_cache: PriceCache,
        stream_url: str = DEFAULT_STREAM_URL,
        reconnect_attempts: int = 0,
        backoff_base: float = 1.0,
        backoff_max: float = 30.0,
        ping_interval: float | None = 20.0,
    ) -> None:
        self._cache = price_cache
        self._stream_url = stream_url
        self._reconnect_attempts = reconnect_attempts
        self._backoff_base = backoff_base
        self._backoff_max = backoff_max
        self._ping_interval = ping_interval

        self._symbols: list[str] = []
        self._path: str = ""  # Sorted stream path; identity of the active subscription
        self._state = ConnectionState.IDLE
        self._generation: int = 0
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()
        self._stopped = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def url(self) -> str | None:
        """Combined stream URL for the active symbol set, or None when idle."""
        if not self._path:
            return None
        return f"{self._stream_url}?streams={self._path}"

    async def start(self, symbols: Iterable[str]) -> None:
        await self.set_symbols(symbols)
        logger.info("Binance stream started: %d symbols", len(self._symbols))

    async def stop(self) -> None:
        # Invalidate in-flight frames before waiting on anything
        self._stopped = True
        self._generation += 1
        async with self._lock:
            await self._close_connection()
            self._state = ConnectionState.CLOSED
        logger.info("Binance stream stopped")

    async def set_symbols(self, symbols: Iterable[str]) -> None:
        if self._stopped:
            raise RuntimeError("BinanceStreamSource has been stopped")

        wanted = unique_symbols(symbols)
        path = build_stream_path(wanted)

        async with self._lock:
            if self._stopped:
                return

            if path == self._path:
                if wanted != self._symbols:
                    logger.debug("Binance: same streams, candidate symbols now %s", wanted)
                    self._symbols = wanted
                return

            await self._close_connection()
            self._symbols = wanted
            self._path = path
            if path:
                self._open_connection()
            else:
                self._state = ConnectionState.IDLE
                logger.info("Binance stream idle: no symbols")

    def get_symbols(self) -> list[str]:
        return list(self._symbols)

    async def refresh(self) -> None:
        """Force a reconnect with the current symbol set."""
        if self._stopped:
            raise RuntimeError("BinanceStreamSource has been stopped")

        async with self._lock:
            await self._close_connection()
            if self._path:
                self._open_connection()
            else:
                self._state = ConnectionState.IDLE

    # --- Internal ---

    def _open_connection(self) -> None:
        self._generation += 1
        generation = self._generation
        url = self.url
        self._state = ConnectionState.CONNECTING
        self._task = asyncio.create_task(
            self._run(generation, url),
            name=f"binance-stream-{generation}",
        )
        logger.info("Binance stream connecting (gen %d): %s", generation, self._path)

    async def _close_connection(self) -> None:
        task = self._task
        self._task = None
        self._generation += 1
        if task is None:
            return

        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._state = ConnectionState.CLOSED
        logger.info("Binance stream closed")

    async def _run(self, generation: int, url: str) -> None:
        """Own one connection for its whole life, including opt-in reconnects."""
        attempt = 0
        while True:
            try:
                await self._consume(generation, url)
                logger.info("Binance stream (gen %d) closed by remote", generation)
            except (WebSocketException, OSError) as e:
                logger.warning("Binance stream (gen %d) failed: %s", generation, e)
            except Exception:
                logger.exception("Binance stream (gen %d) crashed", generation)

            if generation != self._generation:
                return
            if self._state is ConnectionState.OPEN:
                attempt = 0
            if attempt >= self._reconnect_attempts:
                break

            delay = min(self._backoff_max, self._backoff_base * 2**attempt)
            attempt += 1
            self._state = ConnectionState.CONNECTING
            logger.info(
                "Reconnecting Binance stream in %.1fs (attempt %d/%d)",
                delay,
                attempt,
                self._reconnect_attempts,
            )
            await asyncio.sleep(delay)

        self._state = ConnectionState.CLOSED
        logger.warning("Binance stream down, prices for %s will go stale", self._symbols)

    async def _consume(self, generation: int, url: str) -> None:
        # No open timeout: a slow handshake just delays the first price.
        async with websockets.connect(
            url,
            ping_interval=self._ping_interval,
            open_timeout=None,
        ) as ws:
            async for raw in ws:
                if generation != self._generation:
                    break
                self._on_frame(generation, raw)

    def _on_frame(self, generation: int, raw: str | bytes) -> None:
        """Handle one frame synchronously; stale generations are dropped."""
        if generation != self._generation:
            return
        if self._state is ConnectionState.CONNECTING:
            self._state = ConnectionState.OPEN
            logger.info("Binance stream open (gen %d)", generation)

        tick = decode_frame(raw, self._symbols)
        if tick is not None:
            self._cache.update(tick.symbol, tick.price, tick.timestamp)
