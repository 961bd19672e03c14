"""Tests for decode_frame."""

import json
import logging

from papertrade.market.frames import decode_frame
from papertrade.market.models import PriceTick

from fakes import trade


def _raw(frame: dict) -> str:
    return json.dumps(frame)


class TestDecodeFrame:
    """Unit tests for the combined-stream demultiplexer."""

    def test_trade_frame(self):
        """Test that a trade frame maps back to the subscribed symbol."""
        tick = decode_frame(_raw(trade("BTCUSDT", "67123.45")), ["BTC/USDT"])
        assert tick == PriceTick(symbol="BTC/USDT", price=67123.45, timestamp=1700000000.0)

    def test_bytes_frame(self):
        """Test that binary frames decode the same way."""
        tick = decode_frame(_raw(trade("ETHUSDT", "3500.1")).encode(), ["ETH"])
        assert tick is not None
        assert tick.symbol == "ETH"
        assert tick.price == 3500.1

    def test_interleaved_symbols(self):
        """Test that each frame resolves to its own symbol."""
        candidates = ["BTC/USDT", "$ATOM", "ETH"]
        symbols = [
            decode_frame(_raw(trade(wire, "1.0")), candidates).symbol
            for wire in ("ATOMUSDT", "BTCUSDT", "ETHUSDT", "ATOMUSDT")
        ]
        assert symbols == ["$ATOM", "BTC/USDT", "ETH", "$ATOM"]

    def test_missing_trade_time(self):
        """Test that a frame without T leaves the timestamp to the cache."""
        tick = decode_frame(_raw(trade("BTCUSDT", "1.5", trade_time=None)), ["BTC/USDT"])
        assert tick is not None
        assert tick.timestamp is None

    def test_unmatched_symbol_dropped(self):
        """Test that a frame for an unsubscribed pair is dropped."""
        assert decode_frame(_raw(trade("SOLUSDT", "150.0")), ["BTC/USDT"]) is None

    def test_malformed_json_dropped_and_logged(self, caplog):
        """Test that invalid JSON is dropped with a warning."""
        with caplog.at_level(logging.WARNING, logger="papertrade.market.frames"):
            assert decode_frame("{not json", ["BTC/USDT"]) is None
        assert "malformed" in caplog.text

    def test_non_numeric_price_dropped(self):
        """Test that a non-numeric price is dropped."""
        assert decode_frame(_raw(trade("BTCUSDT", "abc")), ["BTC/USDT"]) is None

    def test_nan_price_dropped(self):
        """Test that 'nan' never reaches the cache even though float() accepts it."""
        assert decode_frame(_raw(trade("BTCUSDT", "nan")), ["BTC/USDT"]) is None
        assert decode_frame(_raw(trade("BTCUSDT", "inf")), ["BTC/USDT"]) is None

    def test_non_positive_price_dropped(self):
        """Test that zero and negative prices are dropped."""
        assert decode_frame(_raw(trade("BTCUSDT", "0")), ["BTC/USDT"]) is None
        assert decode_frame(_raw(trade("BTCUSDT", "-5")), ["BTC/USDT"]) is None

    def test_null_price_dropped(self):
        """Test that a null price is dropped."""
        assert decode_frame(_raw(trade("BTCUSDT", None)), ["BTC/USDT"]) is None

    def test_control_frame_ignored(self):
        """Test that subscription acks and other shapes are ignored silently."""
        assert decode_frame('{"result": null, "id": 1}', ["BTC/USDT"]) is None
        assert decode_frame('{"stream": "btcusdt@trade", "data": {"e": "ping"}}', ["BTC/USDT"]) is None
        assert decode_frame('[1, 2, 3]', ["BTC/USDT"]) is None
        assert decode_frame('{"data": "oops"}', ["BTC/USDT"]) is None

    def test_no_candidates(self):
        """Test that nothing resolves when nothing is subscribed."""
        assert decode_frame(_raw(trade("BTCUSDT", "1.0")), []) is None
