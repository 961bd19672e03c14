"""Symbol normalization between dashboard symbols and Binance stream names.

Dashboard symbols come in several spellings ("BTC/USDT", "$ATOM", "ETH").
Binance names streams by the lowercase concatenated pair ("btcusdt@trade").
"""

from __future__ import annotations

import logging
import string
from collections.abc import Iterable

logger = logging.getLogger(__name__)

QUOTE_SUFFIX = "usdt"
STREAM_SUFFIX = "@trade"
STREAM_SEPARATOR = "/"

_MARKER = "$"
_SEPARATORS = ("/", "-")
_LEADING = _MARKER + string.whitespace


def normalize(symbol: str) -> str:
    """Map a dashboard symbol to its Binance pair, e.g. 'BTC/USDT' -> 'btcusdt'.

    Raises ValueError for a symbol that is empty once markers and separators
    are stripped.
    """
    base = symbol
    for sep in _SEPARATORS:
        base = base.replace(sep, "")
    base = base.lstrip(_LEADING).strip().lower()
    if not base:
        raise ValueError(f"Cannot normalize empty symbol {symbol!r}")

    if not base.endswith(QUOTE_SUFFIX):
        base += QUOTE_SUFFIX
    return base


def stream_name(symbol: str) -> str:
    """Binance trade stream name for a symbol, e.g. 'btcusdt@trade'."""
    return normalize(symbol) + STREAM_SUFFIX


def match_symbol(wire_symbol: str, candidates: Iterable[str]) -> str | None:
    """Resolve a wire symbol ('BTCUSDT') back to the first matching candidate.

    Two candidates that normalize to the same pair are indistinguishable on
    the wire; the first one wins.
    """
    target = wire_symbol.strip().lower()
    for candidate in candidates:
        if normalize(candidate) == target:
            return candidate
    return None


def build_stream_path(symbols: Iterable[str]) -> str:
    """Sorted, de-duplicated stream names joined for a combined stream URL.

    Two symbol sets with the same path subscribe to exactly the same topics,
    so the path doubles as the identity key of a subscription.
    """
    return STREAM_SEPARATOR.join(sorted({stream_name(s) for s in symbols}))


def unique_symbols(symbols: Iterable[str]) -> list[str]:
    """Drop exact duplicates and symbols that cannot be normalized, keeping first-seen order."""
    seen: dict[str, None] = {}
    for symbol in symbols:
        cleaned = symbol.strip()
        if cleaned in seen:
            continue
        try:
            normalize(cleaned)
        except ValueError:
            if cleaned:
                logger.warning("Skipping symbol with no tradable pair: %r", symbol)
            continue
        seen[cleaned] = None
    return list(seen)
