"""Technical analysis result models."""

from pydantic import BaseModel, ConfigDict


class IndicatorAnalysis(BaseModel):
    """RSI(14), SMA(20) and SMA(50) computed on one close series."""

    model_config = ConfigDict(frozen=True)

    instrument: str
    rsi: float | None
    sma20: float | None
    sma50: float | None


class InsufficientData(BaseModel):
    """Not enough price points to compute the requested indicators.

    An expected outcome, not an error.
    """

    model_config = ConfigDict(frozen=True)

    instrument: str
    required: int
    available: int

    @property
    def message(self) -> str:
        return (
            f"Insufficient candle data for {self.instrument}: "
            f"need {self.required}, got {self.available}"
        )
