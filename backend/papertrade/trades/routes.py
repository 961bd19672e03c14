"""Trades and stats HTTP endpoints."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Literal

from fastapi import APIRouter, HTTPException, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field, field_validator

from ..market.cache import PriceCache
from ..market.symbols import normalize
from .models import Direction, TradeStatus
from .pnl import calculate_pnl, close_trade, compute_stats
from .store import TradeStore

logger = logging.getLogger(__name__)


class TradeCreate(BaseModel):
    symbol: str = Field(min_length=1)
    direction: Direction
    entry_low: float = Field(gt=0)
    entry_high: float | None = Field(default=None, gt=0)
    take_profits: list[float] = Field(default_factory=list)
    stop_loss: float = Field(gt=0)
    notes: str | None = None

    @field_validator("symbol")
    @classmethod
    def symbol_has_pair(cls, value: str) -> str:
        normalize(value)
        return value


class TradeClose(BaseModel):
    status: Literal["success", "failed", "partial"]


def create_trades_router(
    store: TradeStore,
    price_cache: PriceCache,
    on_change: Callable[[], Awaitable[object]] | None = None,
) -> APIRouter:
    """Create the trades router.

    `on_change` runs after every ledger mutation; the app uses it to resync
    the price feed subscription right away instead of waiting for the next
    periodic sync.
    """
    router = APIRouter(prefix="/api", tags=["trades"])

    async def changed() -> None:
        if on_change is not None:
            await on_change()

    def with_live_pnl(trade) -> dict:
        price = price_cache.get_price(trade.symbol)
        return {
            **trade.to_dict(),
            "live_price": price,
            "pnl_percent": round(calculate_pnl(trade, price), 4),
        }

    @router.get("/trades")
    def list_trades() -> list[dict]:
        """All trades, newest first, with live PnL for open ones."""
        return [with_live_pnl(trade) for trade in store.list_trades()]

    @router.post("/trades", status_code=201)
    async def create_trade(body: TradeCreate) -> dict:
        try:
            trade = await run_in_threadpool(store.create_trade, body.model_dump())
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        await changed()
        return with_live_pnl(trade)

    def close_at_live_price(trade_id: int, status: TradeStatus):
        trade = store.get_trade(trade_id)
        return close_trade(store, trade_id, status, price_cache.get_price(trade.symbol))

    @router.post("/trades/{trade_id}/close")
    async def close(trade_id: int, body: TradeClose) -> dict:
        """Mark a trade as a win, loss or partial, freezing its current PnL."""
        try:
            trade = await run_in_threadpool(close_at_live_price, trade_id, TradeStatus(body.status))
        except KeyError as e:
            raise HTTPException(status_code=404, detail=f"Trade {trade_id} not found") from e
        except ValueError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        await changed()
        return with_live_pnl(trade)

    @router.delete("/trades/{trade_id}", status_code=204)
    async def delete_trade(trade_id: int) -> Response:
        try:
            await run_in_threadpool(store.delete_trade, trade_id)
        except KeyError as e:
            raise HTTPException(status_code=404, detail=f"Trade {trade_id} not found") from e
        await changed()
        return Response(status_code=204)

    @router.get("/stats")
    def stats() -> dict:
        return compute_stats(store.list_trades()).to_dict()

    return router
