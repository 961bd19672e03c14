"""Paper-trade ledger: trade records, PnL and stats.

Public API:
    Trade, Direction, TradeStatus - Ledger records
    TradeStore         - Protocol the dashboard consumes
    SQLiteTradeStore   - SQLite implementation
    calculate_pnl      - Display PnL for a trade given a live price
    compute_stats      - Totals, wins, losses, win rate
    close_trade        - Freeze PnL and mark a trade won/lost
    create_trades_router - FastAPI router factory for trade endpoints
"""

from .models import Direction, Trade, TradeStatus
from .pnl import TradeStats, calculate_pnl, close_trade, compute_stats, unrealized_pnl
from .routes import create_trades_router
from .store import SQLiteTradeStore, TradeStore

__all__ = [
    "Direction",
    "SQLiteTradeStore",
    "Trade",
    "TradeStats",
    "TradeStatus",
    "TradeStore",
    "calculate_pnl",
    "close_trade",
    "compute_stats",
    "create_trades_router",
    "unrealized_pnl",
]
