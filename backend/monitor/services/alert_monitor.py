"""Price alert cycle."""

import logging

from monitor_core.alert_evaluator import AlertEvaluation, AlertEvaluator
from monitor_core.protocols import MarketDataSource, MonitorStore
from monitor.services.notifications import Notifier

logger = logging.getLogger(__name__)


class PriceAlertMonitor:
    """Evaluate active price alerts once per cycle.

    Prices are fetched once and shared by every alert in the pass.
    Triggered alerts are deleted by id in one batch before any
    notification goes out, so a triggered alert cannot fire twice. Alerts
    created or deleted while prices were being fetched are left alone.
    """

    def __init__(
        self,
        market: MarketDataSource,
        store: MonitorStore,
        notifier: Notifier,
        evaluator: AlertEvaluator | None = None,
    ):
        self.market = market
        self.store = store
        self.notifier = notifier
        self.evaluator = evaluator or AlertEvaluator()

    async def run_cycle(self) -> AlertEvaluation | None:
        alerts = await self.store.load_alerts()
        if not alerts:
            return None

        prices = await self.market.get_market_prices()
        if not prices:
            logger.warning("Alert cycle skipped: market prices unavailable")
            return None

        evaluation = self.evaluator.evaluate(alerts, prices)
        if not evaluation.changed:
            return evaluation

        await self.store.remove_alerts([t.alert.id for t in evaluation.triggered])

        for trigger in evaluation.triggered:
            logger.info(
                f"Alert {trigger.alert.id} triggered: {trigger.instrument} "
                f"{trigger.alert.condition.value} {trigger.alert.target_price} "
                f"(price={trigger.current_price})"
            )
            await self.notifier.alert(trigger)

        return evaluation
