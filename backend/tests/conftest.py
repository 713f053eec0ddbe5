"""Shared in-memory collaborators for service and API tests."""

import pytest

from monitor_core.models import (
    AssetBalance,
    BalanceState,
    DailyHistoryEntry,
    HeldTradePost,
    HourlyHistoryEntry,
    MonitorPreferences,
    MovementAlertSettings,
    Portfolio,
    PriceAlert,
    TrackedCoin,
)


class InMemoryStore:
    """MonitorStore kept in plain Python containers."""

    def __init__(self):
        self.balance_state = BalanceState()
        self.alert_settings = MovementAlertSettings()
        self.preferences = MonitorPreferences()
        self.capital = 0.0
        self.alerts: list[PriceAlert] = []
        self.history: list[DailyHistoryEntry] = []
        self.hourly: list[HourlyHistoryEntry] = []
        self.tracked: list[TrackedCoin] = []
        self.held_posts: list[HeldTradePost] = []
        self.saved_states: list[BalanceState] = []
        self.alert_removals = 0

    async def load_balance_state(self):
        return self.balance_state

    async def save_balance_state(self, state):
        self.balance_state = state
        self.saved_states.append(state)

    async def load_alert_settings(self):
        return self.alert_settings

    async def save_alert_settings(self, settings):
        self.alert_settings = settings

    async def load_preferences(self):
        return self.preferences

    async def save_preferences(self, preferences):
        self.preferences = preferences

    async def load_capital(self):
        return self.capital

    async def save_capital(self, amount):
        self.capital = amount

    async def load_alerts(self):
        return list(self.alerts)

    async def add_alert(self, alert):
        self.alerts.append(alert)

    async def delete_alert(self, alert_id):
        before = len(self.alerts)
        self.alerts = [a for a in self.alerts if a.id != alert_id]
        return len(self.alerts) < before

    async def save_alerts(self, alerts):
        self.alerts = list(alerts)

    async def remove_alerts(self, alert_ids):
        before = len(self.alerts)
        self.alerts = [a for a in self.alerts if a.id not in alert_ids]
        self.alert_removals += 1
        return before - len(self.alerts)

    async def load_history(self):
        return list(self.history)

    async def append_history(self, entry):
        if all(e.date != entry.date for e in self.history):
            self.history.append(entry)

    async def load_hourly_history(self):
        return list(self.hourly)

    async def append_hourly_history(self, entry):
        self.hourly.append(entry)

    async def save_hourly_history(self, entries):
        self.hourly = list(entries)

    async def load_tracked_coins(self):
        return list(self.tracked)

    async def add_tracked_coin(self, coin):
        if any(c.instrument == coin.instrument for c in self.tracked):
            return False
        self.tracked.append(coin)
        return True

    async def remove_tracked_coin(self, instrument):
        before = len(self.tracked)
        self.tracked = [c for c in self.tracked if c.instrument != instrument]
        return len(self.tracked) < before

    async def load_held_posts(self):
        return list(self.held_posts)

    async def hold_post(self, post):
        self.held_posts.append(post)

    async def take_held_post(self, post_id):
        for post in self.held_posts:
            if post.id == post_id:
                self.held_posts.remove(post)
                return post
        return None

    async def clear_all(self):
        self.__init__()


class FakeMarket:
    """MarketDataSource returning canned data."""

    def __init__(self, prices=None, balances=None, closes=None, error=None):
        self.prices = prices or {}
        self.balances = balances or {}
        self.closes = closes or []
        self.error = error
        self.price_calls = 0

    async def get_market_prices(self):
        self.price_calls += 1
        return dict(self.prices)

    async def get_portfolio(self, prices):
        if self.error:
            return Portfolio(error=self.error)

        assets = []
        for asset, amount in self.balances.items():
            price = 1.0 if asset == "USDT" else prices.get(f"{asset}-USDT", 0.0)
            assets.append(AssetBalance(asset=asset, amount=amount, price=price, value=amount * price))
        return Portfolio(assets=assets, total=sum(a.value for a in assets))

    async def get_historical_candles(self, instrument, count):
        return self.closes[-count:]


class RecordingSink:
    """NotificationSink that records every message."""

    def __init__(self, succeed=True):
        self.sent: list[tuple[str, str]] = []
        self.succeed = succeed

    async def send(self, recipient, message):
        self.sent.append((recipient, message))
        return self.succeed


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_market():
    return FakeMarket
