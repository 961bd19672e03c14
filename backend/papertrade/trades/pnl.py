"""Profit/loss figures for paper trades."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .models import Direction, Trade, TradeStatus, utcnow
from .store import TradeStore


def unrealized_pnl(direction: Direction, entry: float, price: float) -> float:
    """Percent move from entry in the trade's favour."""
    if entry == 0:
        return 0.0
    diff = price - entry if direction is Direction.LONG else entry - price
    return diff / entry * 100


def calculate_pnl(trade: Trade, price: float | None) -> float:
    """PnL percent to display for a trade.

    Closed trades report their frozen pnl. Open trades without a live price
    yet report 0 rather than a guess.
    """
    if not trade.is_open:
        return trade.pnl or 0.0
    if not price:
        return 0.0
    return unrealized_pnl(trade.direction, trade.entry_price, price)


@dataclass(frozen=True)
class TradeStats:
    total: int = 0
    wins: int = 0
    losses: int = 0
    total_pnl: float = 0.0

    @property
    def win_rate(self) -> float:
        """Wins as a percent of all trades (open ones included)."""
        if self.total == 0:
            return 0.0
        return self.wins / self.total * 100

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "wins": self.wins,
            "losses": self.losses,
            "total_pnl": round(self.total_pnl, 4),
            "win_rate": round(self.win_rate, 1),
        }


def compute_stats(trades: Iterable[Trade]) -> TradeStats:
    """Aggregate ledger stats; total_pnl sums the frozen pnl of each trade."""
    total = wins = losses = 0
    total_pnl = 0.0
    for trade in trades:
        total += 1
        if trade.status is TradeStatus.SUCCESS:
            wins += 1
        elif trade.status is TradeStatus.FAILED:
            losses += 1
        total_pnl += trade.pnl or 0.0
    return TradeStats(total=total, wins=wins, losses=losses, total_pnl=total_pnl)


def close_trade(store: TradeStore, trade_id: int, status: TradeStatus, price: float | None) -> Trade:
    """Close an open trade, freezing its PnL at `price`.

    Raises KeyError for an unknown trade and ValueError when the trade is
    already closed or `status` is OPEN.
    """
    if status is TradeStatus.OPEN:
        raise ValueError("Cannot close a trade with status 'open'")

    trade = store.get_trade(trade_id)
    if not trade.is_open:
        raise ValueError(f"Trade {trade_id} is already {trade.status.value}")

    return store.update_trade(
        trade_id,
        {
            "status": status,
            "pnl": calculate_pnl(trade, price),
            "closed_at": utcnow(),
        },
    )
