"""Fixtures for trade ledger tests."""

import pytest

from papertrade.trades.store import SQLiteTradeStore


@pytest.fixture
def store():
    """Empty in-memory ledger."""
    ledger = SQLiteTradeStore(":memory:")
    yield ledger
    ledger.close()


@pytest.fixture
def long_btc(store):
    return store.create_trade(
        {
            "symbol": "btc/usdt",
            "direction": "LONG",
            "entry_low": 100.0,
            "entry_high": 100.0,
            "take_profits": [110.0, 120.0],
            "stop_loss": 95.0,
        }
    )
