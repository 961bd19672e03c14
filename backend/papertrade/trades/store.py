"""SQLite-backed trade ledger."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any, Protocol

from .models import Direction, Trade, TradeStatus, utcnow

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS trades (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    symbol TEXT NOT NULL,
    direction TEXT NOT NULL,
    entry_low REAL NOT NULL,
    entry_high REAL NOT NULL,
    take_profits TEXT NOT NULL DEFAULT '[]',
    stop_loss REAL NOT NULL,
    status TEXT NOT NULL DEFAULT 'open',
    created_at TEXT NOT NULL,
    closed_at TEXT,
    pnl REAL,
    notes TEXT
)
"""

_REQUIRED = ("symbol", "direction", "entry_low", "stop_loss")
_UPDATABLE = {
    "symbol",
    "direction",
    "entry_low",
    "entry_high",
    "take_profits",
    "stop_loss",
    "status",
    "closed_at",
    "pnl",
    "notes",
}


class TradeStore(Protocol):
    """What the dashboard needs from a trade ledger."""

    def list_trades(self) -> list[Trade]:
        """All trades, newest first."""

    def get_trade(self, trade_id: int) -> Trade:
        """One trade; raises KeyError if unknown."""

    def create_trade(self, fields: Mapping[str, Any]) -> Trade:
        """Insert a new open trade."""

    def update_trade(self, trade_id: int, fields: Mapping[str, Any]) -> Trade:
        """Overwrite the given fields; raises KeyError if unknown."""

    def delete_trade(self, trade_id: int) -> None:
        """Remove a trade; raises KeyError if unknown."""

    def symbols(self) -> list[str]:
        """Distinct symbols across trades, newest trade first."""


class SQLiteTradeStore:
    """TradeStore on a single SQLite connection.

    Pass ":memory:" for a throwaway ledger. The connection is shared across
    threads behind a lock so FastAPI's threadpool and the event loop can both
    use it.
    """

    def __init__(self, path: str | Path = "papertrade.db") -> None:
        self.path = str(path)
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = Lock()
        with self._lock, self._conn:
            self._conn.execute(_SCHEMA)
        logger.info("Trade store opened: %s", self.path)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def list_trades(self) -> list[Trade]:
        with self._lock:
            rows = self._conn.execute("SELECT * FROM trades ORDER BY created_at DESC, id DESC").fetchall()
        return [_from_row(row) for row in rows]

    def get_trade(self, trade_id: int) -> Trade:
        with self._lock:
            row = self._conn.execute("SELECT * FROM trades WHERE id = ?", (trade_id,)).fetchone()
        if row is None:
            raise KeyError(trade_id)
        return _from_row(row)

    def create_trade(self, fields: Mapping[str, Any]) -> Trade:
        """Insert a new open trade.

        Requires symbol, direction, entry_low and stop_loss. entry_high
        defaults to entry_low; the symbol is stored upper-cased.
        """
        missing = [name for name in _REQUIRED if fields.get(name) in (None, "")]
        if missing:
            raise ValueError(f"Missing trade fields: {', '.join(missing)}")

        entry_low = float(fields["entry_low"])
        entry_high = fields.get("entry_high")
        values = {
            "symbol": str(fields["symbol"]).strip().upper(),
            "direction": Direction(fields["direction"]).value,
            "entry_low": entry_low,
            "entry_high": float(entry_high) if entry_high not in (None, "") else entry_low,
            "take_profits": json.dumps([float(tp) for tp in fields.get("take_profits") or []]),
            "stop_loss": float(fields["stop_loss"]),
            "status": TradeStatus.OPEN.value,
            "created_at": utcnow().isoformat(),
            "notes": fields.get("notes"),
        }
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        with self._lock, self._conn:
            cursor = self._conn.execute(
                f"INSERT INTO trades ({columns}) VALUES ({placeholders})",
                tuple(values.values()),
            )
            trade_id = cursor.lastrowid
        logger.info("Trade %d created: %s %s", trade_id, values["direction"], values["symbol"])
        return self.get_trade(trade_id)

    def update_trade(self, trade_id: int, fields: Mapping[str, Any]) -> Trade:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update trade fields: {', '.join(sorted(unknown))}")
        if not fields:
            return self.get_trade(trade_id)

        values = {name: _to_column(name, value) for name, value in fields.items()}
        assignments = ", ".join(f"{name} = ?" for name in values)
        with self._lock, self._conn:
            cursor = self._conn.execute(
                f"UPDATE trades SET {assignments} WHERE id = ?",
                (*values.values(), trade_id),
            )
        if cursor.rowcount == 0:
            raise KeyError(trade_id)
        logger.info("Trade %d updated: %s", trade_id, ", ".join(values))
        return self.get_trade(trade_id)

    def delete_trade(self, trade_id: int) -> None:
        with self._lock, self._conn:
            cursor = self._conn.execute("DELETE FROM trades WHERE id = ?", (trade_id,))
        if cursor.rowcount == 0:
            raise KeyError(trade_id)
        logger.info("Trade %d deleted", trade_id)

    def symbols(self) -> list[str]:
        return list(dict.fromkeys(trade.symbol for trade in self.list_trades()))


def _to_column(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name == "take_profits":
        return json.dumps([float(tp) for tp in value])
    if name == "direction":
        return Direction(value).value
    if name == "status":
        return TradeStatus(value).value
    if name == "closed_at":
        return value.isoformat() if isinstance(value, datetime) else str(value)
    if name == "symbol":
        return str(value).strip().upper()
    if name == "notes":
        return str(value)
    return float(value)


def _from_row(row: sqlite3.Row) -> Trade:
    return Trade(
        id=row["id"],
        symbol=row["symbol"],
        direction=Direction(row["direction"]),
        entry_low=row["entry_low"],
        entry_high=row["entry_high"],
        stop_loss=row["stop_loss"],
        take_profits=json.loads(row["take_profits"]),
        status=TradeStatus(row["status"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        closed_at=datetime.fromisoformat(row["closed_at"]) if row["closed_at"] else None,
        pnl=row["pnl"],
        notes=row["notes"],
    )
