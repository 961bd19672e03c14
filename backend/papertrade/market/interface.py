"""Abstract interface for price feeds."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable


class MarketDataSource(ABC):
    """Contract for price feed providers.

    Implementations push price updates into a shared PriceCache on their own
    schedule. Downstream code never calls the data source directly for prices;
    it reads from the cache.

    Lifecycle:
        source = create_market_data_source(cache)
        await source.start(["BTC/USDT", "$ATOM"])
        # ... app runs; the subscription follows the trade ledger ...
        await source.set_symbols(["BTC/USDT", "ETH"])
        # ... app shutting down ...
        await source.stop()
    """

    @abstractmethod
    async def start(self, symbols: Iterable[str]) -> None:
        """Begin producing price updates for the given symbols."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop producing updates and release resources.

        Safe to call multiple times. After stop(), the source will not write
        to the cache again.
        """

    @abstractmethod
    async def set_symbols(self, symbols: Iterable[str]) -> None:
        """Replace the active symbol set.

        Order and duplicates do not matter. Prices already in the cache are
        left alone for symbols that drop out.
        """

    @abstractmethod
    def get_symbols(self) -> list[str]:
        """Return the current list of actively tracked symbols."""

    async def add_symbol(self, symbol: str) -> None:
        """Add a symbol to the active set. No-op if already present."""
        symbols = self.get_symbols()
        if symbol.strip() not in symbols:
            await self.set_symbols([*symbols, symbol])

    async def remove_symbol(self, symbol: str) -> None:
        """Remove a symbol from the active set. No-op if not present."""
        symbols = self.get_symbols()
        if symbol.strip() in symbols:
            await self.set_symbols([s for s in symbols if s != symbol.strip()])
