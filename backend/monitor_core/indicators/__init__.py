"""Technical indicators (pure math, no I/O)."""

from monitor_core.indicators.indicators import (
    ANALYSIS_CANDLES,
    RSI_PERIOD,
    SMA_LONG_PERIOD,
    SMA_SHORT_PERIOD,
    IndicatorCalculator,
    moving_average,
    relative_strength,
)

__all__ = [
    "ANALYSIS_CANDLES",
    "RSI_PERIOD",
    "SMA_LONG_PERIOD",
    "SMA_SHORT_PERIOD",
    "IndicatorCalculator",
    "moving_average",
    "relative_strength",
]
