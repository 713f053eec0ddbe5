"""Balance monitoring cycle: detect trades from balance changes."""

import logging
from datetime import datetime, timezone
from typing import Callable

from monitor_core.balance_diff import BalanceDiffEngine, BalanceDiffResult
from monitor_core.models import HeldTradePost, MonitorPreferences, TradeEvent
from monitor_core.protocols import MarketDataSource, MonitorStore
from monitor.services.notifications import Notifier, format_trade_event

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BalanceMonitor:
    """
    Compare the live portfolio with the stored baseline every cycle.

    A cycle is fetch -> diff -> persist -> notify:
    1. Fetch prices and portfolio; any failure aborts with no side effects
    2. Diff against the baseline (pure, see BalanceDiffEngine)
    3. Replace the baseline wholesale when the diff says so
    4. Send one notification per trade event

    With a channel configured and auto-posting off, each trade is held
    for the owner to publish or ignore instead of going out directly.

    The baseline is persisted before notifying, so a failed write leaves
    the old baseline in place and the same trades are detected again on
    the next cycle instead of being lost.
    """

    def __init__(
        self,
        market: MarketDataSource,
        store: MonitorStore,
        notifier: Notifier,
        engine: BalanceDiffEngine | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.market = market
        self.store = store
        self.notifier = notifier
        self.engine = engine or BalanceDiffEngine()
        self.clock = clock

    async def run_cycle(self) -> BalanceDiffResult | None:
        """Run one balance cycle.

        Returns:
            The diff result, or None if the cycle was skipped
        """
        preferences = await self.store.load_preferences()

        prices = await self.market.get_market_prices()
        if not prices:
            logger.warning("Balance cycle skipped: market prices unavailable")
            await self.notifier.debug("Failed to fetch market prices for monitoring.", preferences)
            return None

        portfolio = await self.market.get_portfolio(prices)
        if not portfolio.ok:
            logger.warning(f"Balance cycle skipped: {portfolio.error}")
            await self.notifier.debug("Failed to fetch current portfolio for monitoring.", preferences)
            return None

        baseline = await self.store.load_balance_state()
        movement_settings = await self.store.load_alert_settings()

        snapshot = portfolio.to_snapshot(self.clock())
        result = self.engine.diff(baseline, snapshot, prices, movement_settings)

        if result.needs_persist:
            await self.store.save_balance_state(result.new_state)
            logger.info(
                f"Balance baseline updated ({result.reason.value}): "
                f"{len(result.changes)} change(s), total={snapshot.total_value:.2f}"
            )

        for change in result.changes:
            sign = "+" if change.delta > 0 else ""
            await self.notifier.debug(
                f"Balance change detected for {change.asset}: {sign}{change.delta:.6f}",
                preferences,
            )

        for event in result.trade_events:
            logger.info(
                f"Trade detected: {event.direction.value} {event.quantity:.6f} {event.asset} "
                f"(~${event.notional_value:.2f})"
            )
            await self._route_trade(event, preferences)

        return result

    async def _route_trade(self, event: TradeEvent, preferences: MonitorPreferences) -> None:
        if preferences.auto_post_to_channel or not self.notifier.channel_id:
            await self.notifier.trade(event, preferences)
            return

        post = HeldTradePost(asset=event.asset, message=format_trade_event(event))
        await self.store.hold_post(post)
        await self.notifier.review_trade(post)
