"""Tests for the trades API and the app wiring."""

import pytest
from fastapi.testclient import TestClient

from papertrade.config import Settings
from papertrade.main import create_app


@pytest.fixture
def client():
    """App on the offline feed with an in-memory ledger."""
    app = create_app(Settings(price_feed="simulator", database_path=":memory:", sync_interval=60.0))
    with TestClient(app) as test_client:
        yield test_client


def _open(client, **overrides) -> dict:
    body = {"symbol": "btc/usdt", "direction": "LONG", "entry_low": 100.0, "stop_loss": 95.0}
    body.update(overrides)
    response = client.post("/api/trades", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestTradesApi:
    """CRUD endpoints."""

    def test_create_and_list(self, client):
        """Test that a created trade is listed with live price fields."""
        created = _open(client, take_profits=[110.0])

        trades = client.get("/api/trades").json()

        assert [t["id"] for t in trades] == [created["id"]]
        assert trades[0]["symbol"] == "BTC/USDT"
        assert trades[0]["entry_high"] == 100.0
        assert "live_price" in trades[0]
        assert "pnl_percent" in trades[0]

    def test_create_subscribes_symbol(self, client):
        """Test that a new trade's symbol starts receiving prices right away."""
        _open(client, symbol="$ATOM")

        source = client.app.state.source
        assert source.get_symbols() == ["$ATOM"]
        assert client.app.state.price_cache.get_price("$ATOM") is not None

    def test_create_validation(self, client):
        """Test that invalid bodies are rejected."""
        response = client.post("/api/trades", json={"symbol": "ETH", "direction": "UP", "entry_low": 1, "stop_loss": 1})
        assert response.status_code == 422
        response = client.post("/api/trades", json={"symbol": "ETH", "direction": "LONG", "entry_low": -1, "stop_loss": 1})
        assert response.status_code == 422

    def test_create_rejects_symbol_without_pair(self, client):
        """Test that a symbol with nothing tradable in it is a 422, not a stored row."""
        response = client.post(
            "/api/trades", json={"symbol": "$\t/", "direction": "LONG", "entry_low": 1, "stop_loss": 1}
        )

        assert response.status_code == 422
        assert client.get("/api/trades").json() == []

    def test_junk_ledger_symbol_does_not_block_feed(self, client):
        """Test that an unusable stored symbol is skipped when syncing the feed."""
        client.app.state.store.create_trade({"symbol": "$\t/", "direction": "LONG", "entry_low": 1, "stop_loss": 1})

        _open(client, symbol="SOL")

        assert client.app.state.source.get_symbols() == ["SOL"]

    def test_close_trade(self, client):
        """Test that closing freezes the PnL and updates stats."""
        created = _open(client)

        response = client.post(f"/api/trades/{created['id']}/close", json={"status": "success"})

        assert response.status_code == 200
        closed = response.json()
        assert closed["status"] == "success"
        assert closed["closed_at"] is not None
        assert closed["pnl_percent"] == pytest.approx(closed["pnl"], abs=1e-4)

        stats = client.get("/api/stats").json()
        assert stats["total"] == 1
        assert stats["wins"] == 1
        assert stats["win_rate"] == 100.0

    def test_close_twice_conflicts(self, client):
        """Test that closing a closed trade returns 409."""
        created = _open(client)
        client.post(f"/api/trades/{created['id']}/close", json={"status": "failed"})

        response = client.post(f"/api/trades/{created['id']}/close", json={"status": "success"})

        assert response.status_code == 409

    def test_close_unknown(self, client):
        """Test that closing a missing trade returns 404."""
        response = client.post("/api/trades/42/close", json={"status": "success"})
        assert response.status_code == 404

    def test_close_bad_status(self, client):
        """Test that 'open' is not accepted as a closing status."""
        created = _open(client)
        response = client.post(f"/api/trades/{created['id']}/close", json={"status": "open"})
        assert response.status_code == 422

    def test_delete(self, client):
        """Test deleting a trade and unsubscribing its symbol."""
        created = _open(client, symbol="ETH")

        response = client.delete(f"/api/trades/{created['id']}")

        assert response.status_code == 204
        assert client.get("/api/trades").json() == []
        assert client.app.state.source.get_symbols() == []

    def test_delete_unknown(self, client):
        """Test that deleting a missing trade returns 404."""
        assert client.delete("/api/trades/42").status_code == 404

    def test_stats_empty(self, client):
        """Test stats for an empty ledger."""
        assert client.get("/api/stats").json() == {
            "total": 0,
            "wins": 0,
            "losses": 0,
            "total_pnl": 0.0,
            "win_rate": 0.0,
        }

    def test_prices_endpoint(self, client):
        """Test that the price table is exposed keyed by dashboard symbol."""
        _open(client, symbol="$ATOM")

        prices = client.get("/api/prices").json()

        assert "$ATOM" in prices
        assert prices["$ATOM"]["price"] > 0
