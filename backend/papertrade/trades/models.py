"""Data models for the paper-trade ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Direction(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class TradeStatus(str, Enum):
    OPEN = "open"
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Trade:
    """One hypothetical position.

    Take-profit and stop-loss levels are recorded for display only; nothing
    evaluates them against the live price.
    """

    id: int
    symbol: str
    direction: Direction
    entry_low: float
    entry_high: float
    stop_loss: float
    take_profits: list[float] = field(default_factory=list)
    status: TradeStatus = TradeStatus.OPEN
    created_at: datetime = field(default_factory=utcnow)
    closed_at: datetime | None = None
    pnl: float | None = None  # Percent, frozen when the trade is closed
    notes: str | None = None

    @property
    def entry_price(self) -> float:
        """Midpoint of the entry range."""
        return (self.entry_low + self.entry_high) / 2

    @property
    def is_open(self) -> bool:
        return self.status is TradeStatus.OPEN

    def to_dict(self) -> dict:
        """Serialize for JSON responses."""
        return {
            "id": self.id,
            "symbol": self.symbol,
            "direction": self.direction.value,
            "entry_low": self.entry_low,
            "entry_high": self.entry_high,
            "take_profits": list(self.take_profits),
            "stop_loss": self.stop_loss,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "pnl": self.pnl,
            "notes": self.notes,
        }
