"""Portfolio value history models."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class DailyHistoryEntry(BaseModel):
    """Daily portfolio total. Append-only, kept forever."""

    model_config = ConfigDict(frozen=True)

    date: date
    total: float = Field(ge=0)
    timestamp: datetime


class HourlyHistoryEntry(BaseModel):
    """Hourly portfolio total. Kept for the trailing retention window."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    total: float = Field(ge=0)
    hour: int = Field(ge=0, le=23)


class PerformanceStats(BaseModel):
    """Summary statistics over a series of portfolio totals."""

    start_value: float
    end_value: float
    pnl: float
    pnl_percent: float
    max_value: float
    min_value: float
    avg_value: float
