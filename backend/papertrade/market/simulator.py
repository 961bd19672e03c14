"""GBM-based offline price feed.

Produces the same combined-stream trade frames Binance sends and routes them
through decode_frame, so the offline feed exercises the same demultiplexing
path as the live one.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import random
import time
from collections.abc import Iterable

import numpy as np

from .cache import PriceCache
from .frames import decode_frame
from .interface import MarketDataSource
from .seed_prices import (
    CORRELATION_GROUPS,
    DEFAULT_CORR,
    DEFAULT_PARAMS,
    INTRA_MAJORS_CORR,
    MAJOR_ALT_CORR,
    PAIR_PARAMS,
    SEED_PRICES,
)
from .symbols import STREAM_SUFFIX, normalize, unique_symbols

logger = logging.getLogger(__name__)


class GBMSimulator:
    """Geometric Brownian Motion simulator for correlated crypto pairs.

    Math:
        S(t+dt) = S(t) * exp((mu - sigma^2/2) * dt + sigma * sqrt(dt) * Z)

    Where:
        S(t)   = current price
        mu     = annualized drift (expected return)
        sigma  = annualized volatility
        dt     = time step as fraction of a year
        Z      = correlated standard normal random variable

    Crypto trades around the clock, so a year is 365 * 24h of seconds.
    """

    SECONDS_PER_YEAR = 365 * 24 * 3600  # 31,536,000
    DEFAULT_DT = 0.5 / SECONDS_PER_YEAR  # ~1.59e-8

    def __init__(
        self,
        pairs: list[str],
        dt: float = DEFAULT_DT,
        event_probability: float = 0.001,
    ) -> None:
        self._dt = dt
        self._event_prob = event_probability

        self._pairs: list[str] = []
        self._prices: dict[str, float] = {}
        self._params: dict[str, dict[str, float]] = {}

        self._cholesky: np.ndarray | None = None

        for pair in pairs:
            self._add_pair_internal(pair)
        self._rebuild_cholesky()

    # --- Public API ---

    def step(self) -> dict[str, float]:
        """Advance all pairs by one time step. Returns {pair: new_price}."""
        n = len(self._pairs)
        if n == 0:
            return {}

        z_independent = np.random.standard_normal(n)
        if self._cholesky is not None:
            z_correlated = self._cholesky @ z_independent
        else:
            z_correlated = z_independent

        result: dict[str, float] = {}
        for i, pair in enumerate(self._pairs):
            params = self._params[pair]
            mu = params["mu"]
            sigma = params["sigma"]

            drift = (mu - 0.5 * sigma**2) * self._dt
            diffusion = sigma * math.sqrt(self._dt) * z_correlated[i]
            self._prices[pair] *= math.exp(drift + diffusion)

            # Random liquidation cascade / squeeze
            if random.random() < self._event_prob:
                shock_magnitude = random.uniform(0.02, 0.08)
                shock_sign = random.choice([-1, 1])
                self._prices[pair] *= 1 + shock_magnitude * shock_sign
                logger.debug(
                    "Random event on %s: %.1f%% %s",
                    pair,
                    shock_magnitude * 100,
                    "up" if shock_sign > 0 else "down",
                )

            result[pair] = round(self._prices[pair], 8)

        return result

    def add_pair(self, pair: str) -> None:
        """Add a pair to the simulation. Rebuilds the correlation matrix."""
        if pair in self._prices:
            return
        self._add_pair_internal(pair)
        self._rebuild_cholesky()

    def remove_pair(self, pair: str) -> None:
        """Remove a pair from the simulation. Rebuilds the correlation matrix."""
        if pair not in self._prices:
            return
        self._pairs.remove(pair)
        del self._prices[pair]
        del self._params[pair]
        self._rebuild_cholesky()

    def get_price(self, pair: str) -> float | None:
        """Current price for a pair, or None if not tracked."""
        return self._prices.get(pair)

    def get_pairs(self) -> list[str]:
        return list(self._pairs)

    # --- Internals ---

    def _add_pair_internal(self, pair: str) -> None:
        """Add a pair without rebuilding Cholesky (for batch initialization)."""
        if pair in self._prices:
            return
        self._pairs.append(pair)
        self._prices[pair] = SEED_PRICES.get(pair, random.uniform(1.0, 100.0))
        self._params[pair] = PAIR_PARAMS.get(pair, dict(DEFAULT_PARAMS))

    def _rebuild_cholesky(self) -> None:
        n = len(self._pairs)
        if n <= 1:
            self._cholesky = None
            return

        corr = np.eye(n)
        for i in range(n):
            for j in range(i + 1, n):
                rho = self._pairwise_correlation(self._pairs[i], self._pairs[j])
                corr[i, j] = rho
                corr[j, i] = rho

        self._cholesky = np.linalg.cholesky(corr)

    @staticmethod
    def _pairwise_correlation(p1: str, p2: str) -> float:
        """Correlation between two pairs.

          - BTC with ETH:        0.8
          - Major with alt:      0.6
          - Alt with alt:        0.5
        """
        majors = CORRELATION_GROUPS["majors"]
        if p1 in majors and p2 in majors:
            return INTRA_MAJORS_CORR
        if p1 in majors or p2 in majors:
            return MAJOR_ALT_CORR
        return DEFAULT_CORR


def trade_frame(pair: str, price: float, timestamp: float | None = None) -> str:
    """Encode a price as a Binance combined-stream trade frame."""
    ts = timestamp or time.time()
    return json.dumps(
        {
            "stream": pair + STREAM_SUFFIX,
            "data": {
                "e": "trade",
                "E": int(ts * 1000),
                "s": pair.upper(),
                "p": f"{price:.8f}",
                "T": int(ts * 1000),
            },
        }
    )


class SimulatorDataSource(MarketDataSource):
    """MarketDataSource backed by the GBM simulator.

    Runs a background asyncio task that steps the simulator every
    `update_interval` seconds, encodes each price as a trade frame and feeds
    it through decode_frame into the PriceCache.
    """

    def __init__(
        self,
        price_cache: PriceCache,
        update_interval: float = 0.5,
        event_probability: float = 0.001,
    ) -> None:
        self._cache = price_cache
        self._interval = update_interval
        self._event_prob = event_probability
        self._symbols: list[str] = []
        self._sim: GBMSimulator | None = None
        self._task: asyncio.Task | None = None

    async def start(self, symbols: Iterable[str]) -> None:
        self._symbols = unique_symbols(symbols)
        self._sim = GBMSimulator(
            pairs=self._pairs(),
            event_probability=self._event_prob,
        )
        # Seed the cache with initial prices so SSE has data immediately
        self._publish({pair: self._sim.get_price(pair) for pair in self._sim.get_pairs()})
        self._task = asyncio.create_task(self._run_loop(), name="simulator-loop")
        logger.info("Simulator started with %d symbols", len(self._symbols))

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Simulator stopped")

    async def set_symbols(self, symbols: Iterable[str]) -> None:
        self._symbols = unique_symbols(symbols)
        if not self._sim:
            return

        wanted = self._pairs()
        for pair in self._sim.get_pairs():
            if pair not in wanted:
                self._sim.remove_pair(pair)
        for pair in wanted:
            if self._sim.get_price(pair) is None:
                self._sim.add_pair(pair)
                # Seed cache immediately so the symbol has a price right away
                self._publish({pair: self._sim.get_price(pair)})
        logger.info("Simulator: tracking %d symbols", len(self._symbols))

    def get_symbols(self) -> list[str]:
        return list(self._symbols)

    def _pairs(self) -> list[str]:
        return list(dict.fromkeys(normalize(s) for s in self._symbols))

    def _publish(self, prices: dict[str, float]) -> None:
        for pair, price in prices.items():
            tick = decode_frame(trade_frame(pair, price), self._symbols)
            if tick is not None:
                self._cache.update(tick.symbol, tick.price, tick.timestamp)

    async def _run_loop(self) -> None:
        """Core loop: step the simulation, publish frames, sleep."""
        while True:
            try:
                if self._sim:
                    self._publish(self._sim.step())
            except Exception:
                logger.exception("Simulator step failed")
            await asyncio.sleep(self._interval)
