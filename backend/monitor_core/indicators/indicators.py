"""Technical indicators for price analysis.

Close series are chronological (oldest first, most recent last).
Each function returns ``None`` when the series is too short for the
requested period; callers treat that as "insufficient data", not as an
error.
"""

from typing import Sequence

import numpy as np

from monitor_core.models import IndicatorAnalysis, InsufficientData

RSI_PERIOD = 14
SMA_SHORT_PERIOD = 20
SMA_LONG_PERIOD = 50

# RSI needs period+1 points; SMA(50) needs 50. One series covers both.
ANALYSIS_CANDLES = max(RSI_PERIOD + 1, SMA_LONG_PERIOD + 1)


def moving_average(closes: Sequence[float], period: int) -> float | None:
    """Arithmetic mean of the last ``period`` closes."""
    if period <= 0:
        raise ValueError(f"period must be positive, got {period}")
    if len(closes) < period:
        return None

    arr = np.asarray(closes[-period:], dtype=np.float64)
    return float(np.mean(arr))


def relative_strength(closes: Sequence[float], period: int = RSI_PERIOD) -> float | None:
    """Relative Strength Index with Wilder smoothing.

    Average gain/loss are seeded from the first ``period`` differences,
    then smoothed with ``avg = (avg * (period - 1) + x) / period`` for
    each later difference. A zero average loss yields 100.
    """
    if period <= 0:
        raise ValueError(f"period must be positive, got {period}")
    if len(closes) < period + 1:
        return None

    diffs = np.diff(np.asarray(closes, dtype=np.float64))
    gains = np.where(diffs > 0, diffs, 0.0)
    losses = np.where(diffs < 0, -diffs, 0.0)

    avg_gain = float(np.mean(gains[:period]))
    avg_loss = float(np.mean(losses[:period]))

    for i in range(period, len(diffs)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return float(100.0 - 100.0 / (1.0 + rs))


class IndicatorCalculator:
    """Calculate the standard indicator set for one instrument."""

    def __init__(
        self,
        rsi_period: int = RSI_PERIOD,
        sma_short_period: int = SMA_SHORT_PERIOD,
        sma_long_period: int = SMA_LONG_PERIOD,
    ):
        self.rsi_period = rsi_period
        self.sma_short_period = sma_short_period
        self.sma_long_period = sma_long_period

    @property
    def required_points(self) -> int:
        """Minimum closes needed to compute every indicator."""
        return max(self.rsi_period + 1, self.sma_long_period + 1)

    def calculate(
        self,
        instrument: str,
        closes: Sequence[float],
    ) -> IndicatorAnalysis | InsufficientData:
        """Compute RSI and both moving averages on the same series.

        Partial results are never returned: if the series is shorter
        than ``required_points`` the result is ``InsufficientData``.
        """
        if len(closes) < self.required_points:
            return InsufficientData(
                instrument=instrument,
                required=self.required_points,
                available=len(closes),
            )

        return IndicatorAnalysis(
            instrument=instrument,
            rsi=relative_strength(closes, self.rsi_period),
            sma20=moving_average(closes, self.sma_short_period),
            sma50=moving_average(closes, self.sma_long_period),
        )
