"""Price alert and movement alert models."""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AlertCondition(str, Enum):
    """Comparison applied to the current price."""

    GREATER_THAN = ">"
    LESS_THAN = "<"


def _new_alert_id() -> str:
    return uuid.uuid4().hex


class PriceAlert(BaseModel):
    """One-shot fixed-price alert.

    Removed from the active set as soon as it triggers; there is no
    re-arming.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_alert_id)
    instrument: str
    condition: AlertCondition
    target_price: float = Field(gt=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def is_triggered_by(self, price: float) -> bool:
        """Boundary-inclusive in both directions."""
        if self.condition == AlertCondition.GREATER_THAN:
            return price >= self.target_price
        return price <= self.target_price


class AlertTrigger(BaseModel):
    """Fact emitted when an alert fires."""

    model_config = ConfigDict(frozen=True)

    alert: PriceAlert
    current_price: float
    triggered_at: datetime

    @property
    def instrument(self) -> str:
        return self.alert.instrument


class MovementAlertSettings(BaseModel):
    """Percent-movement thresholds: a global value plus per-asset overrides."""

    model_config = ConfigDict(frozen=True)

    global_percent: float = Field(default=5.0, gt=0)
    overrides: dict[str, float] = Field(default_factory=dict)

    def threshold_for(self, asset: str) -> float:
        """Override for the asset if set, otherwise the global percent."""
        return self.overrides.get(asset) or self.global_percent

    def with_global(self, percent: float) -> "MovementAlertSettings":
        return MovementAlertSettings(global_percent=percent, overrides=dict(self.overrides))

    def with_override(self, asset: str, percent: float) -> "MovementAlertSettings":
        """Return new settings with the override set.

        A percent of 0 removes the override so the asset falls back to
        the global value.
        """
        if percent < 0:
            raise ValueError(f"Override percent must be >= 0, got {percent}")
        overrides = dict(self.overrides)
        key = asset.upper()
        if percent == 0:
            overrides.pop(key, None)
        else:
            overrides[key] = percent
        return MovementAlertSettings(global_percent=self.global_percent, overrides=overrides)
