"""History retention: bounded hourly window, unbounded daily history."""

from datetime import datetime, timedelta

from monitor_core.models import DailyHistoryEntry, HourlyHistoryEntry

HOURLY_RETENTION = timedelta(hours=48)


def prune_hourly(
    entries: list[HourlyHistoryEntry],
    now: datetime,
    window: timedelta = HOURLY_RETENTION,
) -> list[HourlyHistoryEntry]:
    """Keep entries captured strictly after ``now - window``.

    Entries exactly on the boundary are dropped. Order is preserved, so
    pruning an already pruned list returns the same list.
    """
    cutoff = now - window
    return [e for e in entries if e.timestamp > cutoff]


def trailing_change(
    history: list[DailyHistoryEntry],
    current_total: float,
    days: int = 7,
) -> tuple[float, float] | None:
    """Change of ``current_total`` versus the entry ``days`` back.

    Returns:
        (absolute change, percent change) or None if history is too short
    """
    if len(history) < days:
        return None

    reference = history[-days].total
    change = current_total - reference
    percent = (change / reference) * 100 if reference > 0 else 0.0
    return change, percent


def last_daily_change(history: list[DailyHistoryEntry]) -> tuple[float, float] | None:
    """Change between the two most recent daily entries."""
    if len(history) < 2:
        return None

    today = history[-1].total
    yesterday = history[-2].total
    change = today - yesterday
    percent = (change / yesterday) * 100 if yesterday > 0 else 0.0
    return change, percent
