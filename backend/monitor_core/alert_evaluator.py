"""Price alert evaluation against a single price snapshot."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from monitor_core.models import AlertTrigger, PriceAlert


@dataclass
class AlertEvaluation:
    """Result of one evaluation pass."""

    triggered: list[AlertTrigger] = field(default_factory=list)
    remaining: list[PriceAlert] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """True if the active alert set must be rewritten."""
        return bool(self.triggered)


class AlertEvaluator:
    """
    Evaluate one-shot price alerts.

    Every alert in a pass is checked against the same ``prices`` mapping.
    Alerts whose instrument has no price stay active unchanged.
    Triggered alerts are dropped from ``remaining``; the caller deletes
    the triggered ids in one batch.
    """

    def evaluate(
        self,
        alerts: list[PriceAlert],
        prices: dict[str, float],
        now: datetime | None = None,
    ) -> AlertEvaluation:
        now = now or datetime.now(timezone.utc)
        result = AlertEvaluation()

        for alert in alerts:
            price = prices.get(alert.instrument)
            if price is None:
                result.remaining.append(alert)
                continue

            if alert.is_triggered_by(price):
                result.triggered.append(
                    AlertTrigger(alert=alert, current_price=price, triggered_at=now)
                )
            else:
                result.remaining.append(alert)

        return result
