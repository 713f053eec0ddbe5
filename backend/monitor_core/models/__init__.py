"""Data models."""

from monitor_core.models.alert import (
    AlertCondition,
    AlertTrigger,
    MovementAlertSettings,
    PriceAlert,
)
from monitor_core.models.analysis import IndicatorAnalysis, InsufficientData
from monitor_core.models.history import (
    DailyHistoryEntry,
    HourlyHistoryEntry,
    PerformanceStats,
)
from monitor_core.models.portfolio import (
    AssetBalance,
    BalanceState,
    HeldTradePost,
    Portfolio,
    PortfolioSnapshot,
    TradeDirection,
    TradeEvent,
)
from monitor_core.models.preferences import (
    MonitorPreferences,
    PendingInput,
    PendingInputKind,
    TrackedCoin,
)

__all__ = [
    "AlertCondition",
    "AlertTrigger",
    "MovementAlertSettings",
    "PriceAlert",
    "IndicatorAnalysis",
    "InsufficientData",
    "DailyHistoryEntry",
    "HourlyHistoryEntry",
    "PerformanceStats",
    "AssetBalance",
    "BalanceState",
    "HeldTradePost",
    "Portfolio",
    "PortfolioSnapshot",
    "TradeDirection",
    "TradeEvent",
    "MonitorPreferences",
    "PendingInput",
    "PendingInputKind",
    "TrackedCoin",
]
