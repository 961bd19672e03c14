"""Thread-safe in-memory price table."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from threading import Lock

from .models import PriceUpdate

logger = logging.getLogger(__name__)

PriceListener = Callable[[PriceUpdate], None]


class PriceCache:
    """Latest price per dashboard symbol.

    Writer: the active price feed (BinanceStreamSource or SimulatorDataSource).
    Readers: SSE streaming endpoint, trades API PnL, subscribed listeners.

    Entries are only ever replaced, never removed: a symbol that drops out of
    the subscription keeps its last known price.
    """

    def __init__(self) -> None:
        self._prices: dict[str, PriceUpdate] = {}
        self._listeners: list[PriceListener] = []
        self._lock = Lock()
        self._version: int = 0  # Monotonically increasing; bumped on every update

    def update(self, symbol: str, price: float, timestamp: float | None = None) -> PriceUpdate:
        """Record a new price for a symbol and notify listeners.

        Automatically computes direction and change from the previous price.
        If this is the first update for the symbol, previous_price == price (direction='flat').
        Listeners run synchronously after the write, so a read from inside a
        listener already sees the new value.
        """
        with self._lock:
            ts = timestamp or time.time()
            prev = self._prices.get(symbol)
            previous_price = prev.price if prev else price

            update = PriceUpdate(
                symbol=symbol,
                price=price,
                previous_price=previous_price,
                timestamp=ts,
            )
            self._prices[symbol] = update
            self._version += 1
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(update)
            except Exception:
                logger.exception("Price listener failed for %s", symbol)
        return update

    def subscribe(self, listener: PriceListener) -> Callable[[], None]:
        """Register a listener called with every PriceUpdate. Returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def get(self, symbol: str) -> PriceUpdate | None:
        """Get the latest price for a single symbol, or None if unknown."""
        with self._lock:
            return self._prices.get(symbol)

    def get_all(self) -> dict[str, PriceUpdate]:
        """Snapshot of all current prices. Returns a shallow copy."""
        with self._lock:
            return dict(self._prices)

    def get_price(self, symbol: str) -> float | None:
        """Convenience: get just the price float, or None."""
        update = self.get(symbol)
        return update.price if update else None

    @property
    def version(self) -> int:
        """Current version counter. Useful for SSE change detection."""
        return self._version

    def __len__(self) -> int:
        with self._lock:
            return len(self._prices)

    def __contains__(self, symbol: str) -> bool:
        with self._lock:
            return symbol in self._prices
