"""Collaborator protocols for market data, persistence and delivery.

Any backend (PostgreSQL, in-memory for tests, another exchange client)
can implement these to be used by the monitoring services.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from monitor_core.models import (
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


@runtime_checkable
class MarketDataSource(Protocol):
    """Poll-based market data and account access."""

    async def get_market_prices(self) -> dict[str, float]:
        """Current prices keyed by instrument. Empty when unavailable."""
        ...

    async def get_portfolio(self, prices: dict[str, float]) -> Portfolio:
        """Holdings valued at ``prices``. ``error`` is set on failure."""
        ...

    async def get_historical_candles(self, instrument: str, count: int) -> list[float]:
        """Up to ``count`` closes, oldest first. Empty when unavailable."""
        ...


@runtime_checkable
class MonitorStore(Protocol):
    """Persistent store.

    Singleton records are read and replaced whole. List records support
    insert/delete by id and full-list overwrite.
    """

    async def load_balance_state(self) -> BalanceState:
        ...

    async def save_balance_state(self, state: BalanceState) -> None:
        ...

    async def load_alert_settings(self) -> MovementAlertSettings:
        ...

    async def save_alert_settings(self, settings: MovementAlertSettings) -> None:
        ...

    async def load_preferences(self) -> MonitorPreferences:
        ...

    async def save_preferences(self, preferences: MonitorPreferences) -> None:
        ...

    async def load_capital(self) -> float:
        ...

    async def save_capital(self, amount: float) -> None:
        ...

    async def load_alerts(self) -> list[PriceAlert]:
        ...

    async def add_alert(self, alert: PriceAlert) -> None:
        ...

    async def delete_alert(self, alert_id: str) -> bool:
        ...

    async def save_alerts(self, alerts: list[PriceAlert]) -> None:
        """Replace the whole active alert list."""
        ...

    async def remove_alerts(self, alert_ids: list[str]) -> int:
        """Delete the given alerts in one write, leaving any others untouched."""
        ...

    async def load_history(self) -> list[DailyHistoryEntry]:
        """Daily history ordered by date."""
        ...

    async def append_history(self, entry: DailyHistoryEntry) -> None:
        """Append an entry. The first entry for a date wins."""
        ...

    async def load_hourly_history(self) -> list[HourlyHistoryEntry]:
        """Hourly history ordered by timestamp."""
        ...

    async def append_hourly_history(self, entry: HourlyHistoryEntry) -> None:
        ...

    async def save_hourly_history(self, entries: list[HourlyHistoryEntry]) -> None:
        """Replace the whole hourly history."""
        ...

    async def load_tracked_coins(self) -> list[TrackedCoin]:
        ...

    async def add_tracked_coin(self, coin: TrackedCoin) -> bool:
        """False if the instrument is already tracked."""
        ...

    async def remove_tracked_coin(self, instrument: str) -> bool:
        ...

    async def load_held_posts(self) -> list[HeldTradePost]:
        ...

    async def hold_post(self, post: HeldTradePost) -> None:
        ...

    async def take_held_post(self, post_id: str) -> HeldTradePost | None:
        """Remove and return a held post, or None if it is gone."""
        ...

    async def clear_all(self) -> None:
        """Delete every record in one write."""
        ...


@runtime_checkable
class NotificationSink(Protocol):
    """Fire-and-forget message delivery."""

    async def send(self, recipient: str, message: str) -> bool:
        ...
