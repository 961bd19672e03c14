"""Fixtures for price feed tests."""

from unittest.mock import patch

import pytest

from fakes import FakeBinance


@pytest.fixture
def fake_binance():
    """Route BinanceStreamSource's websockets.connect() to an in-process fake."""
    fake = FakeBinance()
    with patch("papertrade.market.binance_client.websockets.connect", fake.connect):
        yield fake
