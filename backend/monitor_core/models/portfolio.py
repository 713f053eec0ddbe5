"""Portfolio, balance baseline and trade event models."""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TradeDirection(str, Enum):
    """Direction of an inferred trade."""

    BUY = "buy"
    SELL = "sell"


class AssetBalance(BaseModel):
    """A single holding as reported by the exchange."""

    model_config = ConfigDict(frozen=True)

    asset: str
    amount: float = Field(ge=0)
    price: float = Field(default=0.0, ge=0)
    value: float = Field(default=0.0, ge=0)


class Portfolio(BaseModel):
    """Portfolio report returned by the market data collaborator.

    A non-empty ``error`` means the fetch failed and the rest of the
    report must not be used.
    """

    assets: list[AssetBalance] = Field(default_factory=list)
    total: float = 0.0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return not self.error

    def to_snapshot(self, captured_at: datetime) -> "PortfolioSnapshot":
        return PortfolioSnapshot(
            balances={a.asset: a.amount for a in self.assets},
            total_value=self.total,
            captured_at=captured_at,
        )


class PortfolioSnapshot(BaseModel):
    """Point-in-time view of all balances and the total value."""

    model_config = ConfigDict(frozen=True)

    balances: dict[str, float]
    total_value: float = Field(ge=0)
    captured_at: datetime


class BalanceState(BaseModel):
    """Last observed snapshot, used as the baseline for diffing.

    Always replaced wholesale; never merged field by field.
    """

    model_config = ConfigDict(frozen=True)

    balances: dict[str, float] = Field(default_factory=dict)
    total_value: float = 0.0

    @classmethod
    def from_snapshot(cls, snapshot: PortfolioSnapshot) -> "BalanceState":
        return cls(balances=dict(snapshot.balances), total_value=snapshot.total_value)


class TradeEvent(BaseModel):
    """A trade inferred from a balance change. Emitted, never stored."""

    model_config = ConfigDict(frozen=True)

    asset: str
    direction: TradeDirection
    quantity: float = Field(gt=0)
    approx_price: float
    notional_value: float
    new_balance: float
    observed_at: datetime


class HeldTradePost(BaseModel):
    """Trade message waiting for the owner to publish it or ignore it.

    Created when auto-posting is off; published to the channel on request
    and deleted either way.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    asset: str
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
