"""Reconcile the feed's subscription with the symbols the dashboard needs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

from .interface import MarketDataSource

logger = logging.getLogger(__name__)


class SubscriptionSync:
    """Periodically pushes the desired symbol set into a MarketDataSource.

    The desired set comes from `symbol_provider` (the trade ledger's distinct
    symbols). The source itself decides whether the new set actually needs a
    new connection, so calling sync() with an unchanged set is cheap.
    """

    def __init__(
        self,
        source: MarketDataSource,
        symbol_provider: Callable[[], Iterable[str]],
        interval: float = 30.0,
    ) -> None:
        self._source = source
        self._provider = symbol_provider
        self._interval = interval
        self._task: asyncio.Task | None = None

    async def sync(self) -> list[str]:
        """Run one reconciliation. Returns the symbols now subscribed."""
        try:
            desired = list(self._provider())
        except Exception:
            logger.exception("Could not load symbols, keeping current subscription")
            return self._source.get_symbols()

        await self._source.set_symbols(desired)
        return self._source.get_symbols()

    async def start(self) -> None:
        await self.sync()
        self._task = asyncio.create_task(self._run_loop(), name="subscription-sync")
        logger.info("Subscription sync started: every %.1fs", self._interval)

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Subscription sync stopped")

    async def _run_loop(self) -> None:
        """Sync on interval. First sync already happened in start()."""
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.sync()
            except Exception:
                logger.exception("Subscription sync failed")
