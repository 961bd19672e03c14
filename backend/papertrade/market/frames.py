"""Decoding of Binance combined-stream trade frames."""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable

from .models import PriceTick
from .symbols import match_symbol

logger = logging.getLogger(__name__)


def decode_frame(raw: str | bytes, candidates: Iterable[str]) -> PriceTick | None:
    """Turn one inbound frame into a PriceTick for a subscribed symbol.

    Combined-stream frames look like:

        {"stream": "btcusdt@trade", "data": {"s": "BTCUSDT", "p": "67123.45", "T": 1700000000000, ...}}

    Returns None when the frame should be dropped:
      - not valid JSON (logged)
      - no data.s / data.p pair, e.g. subscription acks (silent)
      - price not a finite positive number (logged)
      - wire symbol matches none of the candidates (silent)
    Never raises for bad input, so a bad frame cannot kill the connection.
    """
    try:
        message = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning("Dropping malformed frame: %s", e)
        return None

    data = message.get("data") if isinstance(message, dict) else None
    if not isinstance(data, dict) or "s" not in data or "p" not in data:
        logger.debug("Ignoring non-trade frame: %.120s", raw)
        return None

    wire_symbol = data["s"]
    try:
        price = float(data["p"])
    except (TypeError, ValueError):
        logger.warning("Dropping frame for %s: invalid price %r", wire_symbol, data["p"])
        return None
    if not math.isfinite(price) or price <= 0:
        logger.warning("Dropping frame for %s: invalid price %r", wire_symbol, data["p"])
        return None

    if not isinstance(wire_symbol, str):
        logger.warning("Dropping frame: invalid symbol %r", wire_symbol)
        return None
    symbol = match_symbol(wire_symbol, candidates)
    if symbol is None:
        logger.debug("No subscribed symbol for %s", wire_symbol)
        return None

    # Binance trade time is Unix milliseconds -> convert to seconds
    trade_time = data.get("T")
    timestamp = trade_time / 1000.0 if isinstance(trade_time, (int, float)) else None

    return PriceTick(symbol=symbol, price=price, timestamp=timestamp)
