"""Tests for the REST API."""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from monitor_core.models import (
    AlertCondition,
    DailyHistoryEntry,
    HeldTradePost,
    HourlyHistoryEntry,
    MovementAlertSettings,
    PendingInput,
    PendingInputKind,
    PriceAlert,
    TrackedCoin,
)
from monitor.api.routes import get_market, get_notifier, get_store
from monitor.main import app
from monitor.services import Notifier
from monitor.storage import pending_input_cache


class TestApi:
    """Tests for API routes with in-memory collaborators."""

    @pytest.fixture
    def market(self, make_market):
        return make_market(
            prices={"BTC-USDT": 50000.0, "ETH-USDT": 3000.0},
            balances={"BTC": 0.1, "ETH": 1.0, "USDT": 2000.0},
            closes=[float(i) for i in range(1, 61)],
        )

    @pytest.fixture
    def notifier(self, sink):
        return Notifier(sink, "1001", "-100200")

    @pytest.fixture
    def client(self, store, market, notifier):
        app.dependency_overrides[get_store] = lambda: store
        app.dependency_overrides[get_market] = lambda: market
        app.dependency_overrides[get_notifier] = lambda: notifier
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_root_and_health(self, client):
        assert client.get("/").json()["name"] == "Portfolio Monitor"
        assert client.get("/health").json() == {"status": "healthy"}

    def test_status(self, client, store):
        store.alerts = [
            PriceAlert(instrument="BTC-USDT", condition=AlertCondition.GREATER_THAN, target_price=1.0)
        ]
        data = client.get("/api/status").json()

        assert data["status"] == "idle"
        assert data["active_alerts"] == 1
        assert data["tasks"] == []

    def test_portfolio(self, client, store):
        store.capital = 8000.0
        data = client.get("/api/portfolio").json()

        assert data["total"] == pytest.approx(10000.0)
        assert data["pnl"] == pytest.approx(2000.0)
        assert data["pnl_percent"] == pytest.approx(25.0)
        assert data["asset_count"] == 3
        assert data["assets"][0]["asset"] == "BTC"
        assert data["largest_asset_share"] == pytest.approx(50.0)
        assert data["weekly_change"] is None

    def test_portfolio_unavailable(self, client, market):
        market.error = "Invalid API key"
        assert client.get("/api/portfolio").status_code == 503

    def test_analysis(self, client):
        data = client.get("/api/analysis/btc-usdt").json()

        assert data["instrument"] == "BTC-USDT"
        assert data["sufficient"] is True
        assert data["rsi"] == 100.0
        assert data["sma20"] == pytest.approx(50.5)

    def test_analysis_insufficient(self, client, market):
        market.closes = [1.0] * 5
        data = client.get("/api/analysis/BTC-USDT").json()

        assert data["sufficient"] is False
        assert data["rsi"] is None
        assert "need 51, got 5" in data["message"]

    def test_analysis_invalid_instrument(self, client):
        assert client.get("/api/analysis/BTCUSDT").status_code == 422

    def test_create_alert_from_text(self, client, store):
        response = client.post("/api/alerts", json={"text": "btc-usdt > 60000"})

        assert response.status_code == 201
        assert response.json()["instrument"] == "BTC-USDT"
        assert len(store.alerts) == 1
        assert store.alerts[0].condition == AlertCondition.GREATER_THAN

    def test_create_alert_from_fields(self, client, store):
        response = client.post(
            "/api/alerts",
            json={"instrument": "ETH-USDT", "condition": "<", "target_price": 2500},
        )
        assert response.status_code == 201
        assert store.alerts[0].target_price == 2500.0

    @pytest.mark.parametrize("body", [
        {"text": "BTC-USDT >> 1"},
        {"text": "BTC-USDT > -1"},
        {"instrument": "BTC-USDT", "condition": ">"},
        {},
    ])
    def test_create_alert_invalid(self, client, store, body):
        assert client.post("/api/alerts", json=body).status_code == 422
        assert store.alerts == []

    def test_list_and_delete_alert(self, client, store):
        alert = PriceAlert(instrument="BTC-USDT", condition=AlertCondition.LESS_THAN, target_price=1.0)
        store.alerts = [alert]

        assert [a["id"] for a in client.get("/api/alerts").json()] == [alert.id]
        assert client.delete(f"/api/alerts/{alert.id}").status_code == 200
        assert store.alerts == []
        assert client.delete(f"/api/alerts/{alert.id}").status_code == 404

    def test_delete_all_alerts(self, client, store):
        store.alerts = [
            PriceAlert(instrument="BTC-USDT", condition=AlertCondition.LESS_THAN, target_price=1.0),
            PriceAlert(instrument="ETH-USDT", condition=AlertCondition.LESS_THAN, target_price=1.0),
        ]
        assert client.delete("/api/alerts").json() == {"deleted": 2}
        assert store.alerts == []

    def test_alert_settings(self, client, store):
        assert client.get("/api/alert-settings").json() == {"global_percent": 5.0, "overrides": {}}

        data = client.put("/api/alert-settings/global", json={"percent": 7.5}).json()
        assert data["global_percent"] == 7.5

        data = client.put("/api/alert-settings/overrides/eth", json={"percent": 2}).json()
        assert data["overrides"] == {"ETH": 2.0}

        data = client.put("/api/alert-settings/overrides/ETH", json={"percent": 0}).json()
        assert data["overrides"] == {}
        assert store.alert_settings == MovementAlertSettings(global_percent=7.5)

    def test_alert_settings_invalid(self, client):
        assert client.put("/api/alert-settings/global", json={"percent": 0}).status_code == 422
        assert client.put("/api/alert-settings/overrides/BTC", json={"percent": -1}).status_code == 422

    def test_capital(self, client, store):
        assert client.get("/api/capital").json() == {"amount": 0.0}
        assert client.put("/api/capital", json={"amount": 1500}).json() == {"amount": 1500.0}
        assert store.capital == 1500.0
        assert client.put("/api/capital", json={"amount": -5}).status_code == 422

    def test_preferences(self, client, store):
        body = {"daily_summary": True, "auto_post_to_channel": False, "debug_mode": True}
        assert client.put("/api/preferences", json=body).json() == body
        assert store.preferences.daily_summary is True
        assert client.get("/api/preferences").json() == body

    def test_performance_daily(self, client, store):
        now = datetime(2024, 5, 10, tzinfo=timezone.utc)
        store.hourly = [
            HourlyHistoryEntry(timestamp=now + timedelta(hours=h), total=100.0 + h, hour=h)
            for h in range(3)
        ]
        data = client.get("/api/performance", params={"period": "24h"}).json()

        assert data["period"] == "24h"
        assert data["stats"]["start_value"] == 100.0
        assert data["stats"]["end_value"] == 102.0

    def test_performance_weekly_uses_daily_history(self, client, store):
        store.history = [
            DailyHistoryEntry(
                date=date(2024, 5, 1) + timedelta(days=i),
                total=float(100 + i),
                timestamp=datetime(2024, 5, 1, tzinfo=timezone.utc) + timedelta(days=i),
            )
            for i in range(10)
        ]
        data = client.get("/api/performance", params={"period": "7d"}).json()

        assert data["stats"]["start_value"] == 103.0
        assert data["stats"]["end_value"] == 109.0

    def test_performance_not_enough_data(self, client):
        data = client.get("/api/performance", params={"period": "30d"}).json()
        assert data["stats"] is None

    def test_performance_invalid_period(self, client):
        assert client.get("/api/performance", params={"period": "1y"}).status_code == 422

    def test_pnl(self, client):
        data = client.post("/api/pnl", json={"buy_price": 100, "sell_price": 120, "quantity": 2}).json()
        assert data["pnl"] == pytest.approx(40.0)
        assert data["pnl_percent"] == pytest.approx(20.0)

    def test_pnl_invalid(self, client):
        response = client.post("/api/pnl", json={"buy_price": 0, "sell_price": 120, "quantity": 2})
        assert response.status_code == 422

    def test_pending_input_round_trip(self, client):
        pending = PendingInput(user_id="42", kind=PendingInputKind.SET_CAPITAL)
        with patch.object(pending_input_cache, 'set_pending', new_callable=AsyncMock, return_value=pending) as mock_set:
            response = client.put("/api/sessions/42/pending-input", json={"kind": "set_capital"})
            assert response.status_code == 200
            assert response.json()["kind"] == "set_capital"
            mock_set.assert_called_once_with("42", PendingInputKind.SET_CAPITAL)

        with patch.object(pending_input_cache, 'get_pending', new_callable=AsyncMock, return_value=pending):
            assert client.get("/api/sessions/42/pending-input").json()["user_id"] == "42"

    def test_pending_input_without_cache(self, client):
        """No Redis means no pending input."""
        assert client.get("/api/sessions/42/pending-input").status_code == 404
        assert client.put("/api/sessions/42/pending-input", json={"kind": "coin_info"}).status_code == 503
        assert client.delete("/api/sessions/42/pending-input").json() == {"cleared": False}

    def test_tracked_coins(self, client, store):
        response = client.post("/api/tracked-coins", json={"instrument": "sol-usdt"})
        assert response.status_code == 201
        assert response.json()["instrument"] == "SOL-USDT"

        assert client.post("/api/tracked-coins", json={"instrument": "SOL-USDT"}).status_code == 409
        assert [c["instrument"] for c in client.get("/api/tracked-coins").json()] == ["SOL-USDT"]

        assert client.delete("/api/tracked-coins/sol-usdt").json() == {"deleted": "SOL-USDT"}
        assert store.tracked == []
        assert client.delete("/api/tracked-coins/SOL-USDT").status_code == 404

    def test_track_invalid_instrument(self, client, store):
        assert client.post("/api/tracked-coins", json={"instrument": "SOLUSDT"}).status_code == 422
        assert store.tracked == []

    def test_publish_held_trade(self, client, store, sink):
        post = HeldTradePost(asset="BTC", message="🟢 *Buy detected*")
        store.held_posts = [post]

        assert [p["id"] for p in client.get("/api/trades/held").json()] == [post.id]
        assert client.post(f"/api/trades/{post.id}/publish").json() == {"published": post.id}
        assert sink.sent == [("-100200", "🟢 *Buy detected*")]
        assert store.held_posts == []
        assert client.post(f"/api/trades/{post.id}/publish").status_code == 404

    def test_publish_failure_keeps_post(self, client, store, sink):
        post = HeldTradePost(asset="BTC", message="msg")
        store.held_posts = [post]
        sink.succeed = False

        assert client.post(f"/api/trades/{post.id}/publish").status_code == 502
        assert store.held_posts == [post]

    def test_publish_without_channel(self, client, store, sink):
        app.dependency_overrides[get_notifier] = lambda: Notifier(sink, "1001")
        post = HeldTradePost(asset="BTC", message="msg")
        store.held_posts = [post]

        assert client.post(f"/api/trades/{post.id}/publish").status_code == 503
        assert store.held_posts == [post]

    def test_ignore_held_trade(self, client, store, sink):
        post = HeldTradePost(asset="ETH", message="msg")
        store.held_posts = [post]

        assert client.delete(f"/api/trades/{post.id}").json() == {"ignored": post.id}
        assert store.held_posts == []
        assert sink.sent == []
        assert client.delete(f"/api/trades/{post.id}").status_code == 404

    def test_delete_all_data_requires_confirm(self, client, store):
        store.capital = 500.0
        assert client.delete("/api/data").status_code == 400
        assert store.capital == 500.0

    def test_delete_all_data(self, client, store):
        store.capital = 500.0
        store.alerts = [
            PriceAlert(instrument="BTC-USDT", condition=AlertCondition.LESS_THAN, target_price=1.0)
        ]
        store.tracked = [TrackedCoin(instrument="BTC-USDT")]
        store.held_posts = [HeldTradePost(asset="BTC", message="msg")]
        store.alert_settings = MovementAlertSettings(global_percent=9.0)

        assert client.delete("/api/data", params={"confirm": "true"}).json() == {"cleared": True}
        assert store.capital == 0.0
        assert store.alerts == []
        assert store.tracked == []
        assert store.held_posts == []
        assert store.alert_settings == MovementAlertSettings()
