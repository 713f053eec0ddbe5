"""Hourly and daily portfolio value snapshots."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from monitor_core.models import DailyHistoryEntry, HourlyHistoryEntry
from monitor_core.protocols import MarketDataSource, MonitorStore
from monitor_core.retention import HOURLY_RETENTION, last_daily_change, prune_hourly
from monitor.services.notifications import Notifier, format_daily_summary

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotService:
    """Record portfolio totals and keep the hourly window bounded."""

    def __init__(
        self,
        market: MarketDataSource,
        store: MonitorStore,
        notifier: Notifier,
        hourly_retention: timedelta = HOURLY_RETENTION,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.market = market
        self.store = store
        self.notifier = notifier
        self.hourly_retention = hourly_retention
        self.clock = clock

    async def _fetch_total(self) -> float | None:
        prices = await self.market.get_market_prices()
        if not prices:
            return None

        portfolio = await self.market.get_portfolio(prices)
        if not portfolio.ok:
            logger.warning(f"Snapshot skipped: {portfolio.error}")
            return None
        return portfolio.total

    async def capture_hourly(self) -> HourlyHistoryEntry | None:
        """Append an hourly entry and prune entries outside the window."""
        total = await self._fetch_total()
        if total is None:
            logger.warning("Hourly snapshot skipped: portfolio unavailable")
            return None

        now = self.clock()
        entry = HourlyHistoryEntry(timestamp=now, total=total, hour=now.hour)
        await self.store.append_hourly_history(entry)

        await self.prune_hourly(now)
        logger.info(f"Hourly snapshot saved: ${total:,.2f}")
        return entry

    async def prune_hourly(self, now: datetime | None = None) -> int:
        """Drop hourly entries older than the retention window.

        Returns:
            Number of entries removed
        """
        now = now or self.clock()
        history = await self.store.load_hourly_history()
        retained = prune_hourly(history, now, self.hourly_retention)

        removed = len(history) - len(retained)
        if removed:
            await self.store.save_hourly_history(retained)
            logger.info(f"Pruned {removed} hourly entries older than {self.hourly_retention}")
        return removed

    async def capture_daily(self) -> DailyHistoryEntry | None:
        """Append a daily entry and send the daily summary if enabled."""
        total = await self._fetch_total()
        if total is None:
            logger.warning("Daily snapshot skipped: portfolio unavailable")
            return None

        now = self.clock()
        entry = DailyHistoryEntry(date=now.date(), total=total, timestamp=now)
        await self.store.append_history(entry)
        logger.info(f"Daily snapshot saved for {entry.date.isoformat()}: ${total:,.2f}")

        preferences = await self.store.load_preferences()
        if preferences.daily_summary:
            history = await self.store.load_history()
            change = last_daily_change(history)
            if change is not None:
                amount, percent = change
                await self.notifier.to_owner(
                    format_daily_summary(entry.date.isoformat(), history[-1].total, amount, percent)
                )

        return entry
