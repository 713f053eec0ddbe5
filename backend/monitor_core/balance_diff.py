"""Balance diffing: infer trades from consecutive portfolio snapshots.

The engine compares the persisted baseline with a freshly fetched
snapshot and decides two things:

1. Which per-asset changes are trades worth reporting (notional value
   above the minimum trade size).
2. Whether the baseline has to be replaced at the end of the cycle.

It never mutates its inputs. The caller persists ``new_state`` only
when ``needs_persist`` is True.
"""

from dataclasses import dataclass, field
from enum import Enum

from monitor_core.models import (
    BalanceState,
    MovementAlertSettings,
    PortfolioSnapshot,
    TradeDirection,
    TradeEvent,
)

# Absolute amount deltas at or below this are polling jitter
NOISE_FLOOR = 1e-6

# Minimum |delta| * price (in quote currency) to report a trade
MIN_TRADE_NOTIONAL = 10.0

# Total-value drift that refreshes the baseline when no balance changed
VALUE_DRIFT_THRESHOLD = 1.0


class PersistReason(str, Enum):
    """Why the baseline must be replaced."""

    NONE = "none"
    BALANCE_CHANGE = "balance_change"
    VALUE_DRIFT = "value_drift"


@dataclass
class AssetChange:
    """A balance delta above the noise floor."""

    asset: str
    previous_amount: float
    current_amount: float
    delta: float
    price: float
    notional: float
    threshold_percent: float  # Resolved movement threshold, informational only


@dataclass
class BalanceDiffResult:
    """Outcome of one diff between baseline and snapshot."""

    changes: list[AssetChange] = field(default_factory=list)
    trade_events: list[TradeEvent] = field(default_factory=list)
    reason: PersistReason = PersistReason.NONE
    new_state: BalanceState | None = None

    @property
    def needs_persist(self) -> bool:
        return self.reason != PersistReason.NONE


class BalanceDiffEngine:
    """Detect economically meaningful balance changes."""

    def __init__(
        self,
        quote_currency: str = "USDT",
        noise_floor: float = NOISE_FLOOR,
        min_trade_notional: float = MIN_TRADE_NOTIONAL,
        value_drift_threshold: float = VALUE_DRIFT_THRESHOLD,
    ):
        self.quote_currency = quote_currency
        self.noise_floor = noise_floor
        self.min_trade_notional = min_trade_notional
        self.value_drift_threshold = value_drift_threshold

    def instrument_for(self, asset: str) -> str:
        """Market instrument used to price an asset, e.g. BTC -> BTC-USDT."""
        return f"{asset}-{self.quote_currency}"

    def diff(
        self,
        baseline: BalanceState,
        snapshot: PortfolioSnapshot,
        prices: dict[str, float],
        movement_settings: MovementAlertSettings | None = None,
    ) -> BalanceDiffResult:
        """Compare a snapshot against the baseline.

        Args:
            baseline: Last persisted balance state
            snapshot: Freshly fetched portfolio snapshot
            prices: Current prices keyed by instrument
            movement_settings: Movement thresholds resolved per asset

        Returns:
            BalanceDiffResult with trade events and the persist decision
        """
        settings = movement_settings or MovementAlertSettings()
        result = BalanceDiffResult()

        for asset, amount in snapshot.balances.items():
            if amount <= 0:
                continue

            previous = baseline.balances.get(asset, 0.0)
            delta = amount - previous
            if abs(delta) <= self.noise_floor:
                continue

            price = prices.get(self.instrument_for(asset), 0.0)
            notional = abs(delta) * price
            result.changes.append(
                AssetChange(
                    asset=asset,
                    previous_amount=previous,
                    current_amount=amount,
                    delta=delta,
                    price=price,
                    notional=notional,
                    threshold_percent=settings.threshold_for(asset),
                )
            )

            if notional > self.min_trade_notional:
                result.trade_events.append(
                    TradeEvent(
                        asset=asset,
                        direction=TradeDirection.BUY if delta > 0 else TradeDirection.SELL,
                        quantity=abs(delta),
                        approx_price=price,
                        notional_value=notional,
                        new_balance=amount,
                        observed_at=snapshot.captured_at,
                    )
                )

        if result.changes:
            result.reason = PersistReason.BALANCE_CHANGE
        elif abs(baseline.total_value - snapshot.total_value) > self.value_drift_threshold:
            result.reason = PersistReason.VALUE_DRIFT

        if result.needs_persist:
            # Full snapshot, not only the changed assets
            result.new_state = BalanceState.from_snapshot(snapshot)

        return result
