"""Portfolio performance arithmetic."""

import math
from dataclasses import dataclass
from typing import Sequence

from monitor_core.models import AssetBalance, PerformanceStats


def performance_stats(totals: Sequence[float]) -> PerformanceStats | None:
    """Summarize a chronological series of portfolio totals.

    Returns None when fewer than two points are available.
    """
    if len(totals) < 2:
        return None

    start = totals[0]
    end = totals[-1]
    pnl = end - start
    return PerformanceStats(
        start_value=start,
        end_value=end,
        pnl=pnl,
        pnl_percent=(pnl / start) * 100 if start > 0 else 0.0,
        max_value=max(totals),
        min_value=min(totals),
        avg_value=sum(totals) / len(totals),
    )


@dataclass
class CapitalPnl:
    """Portfolio value relative to invested capital."""

    total: float
    capital: float
    pnl: float
    pnl_percent: float


def capital_pnl(total: float, capital: float) -> CapitalPnl:
    pnl = total - capital
    return CapitalPnl(
        total=total,
        capital=capital,
        pnl=pnl,
        pnl_percent=(pnl / capital) * 100 if capital > 0 else 0.0,
    )


@dataclass
class TradePnl:
    """Result of the buy/sell PnL calculator."""

    investment: float
    sale_value: float
    pnl: float
    pnl_percent: float


def calculate_trade_pnl(buy_price: float, sell_price: float, quantity: float) -> TradePnl:
    """PnL of buying ``quantity`` at ``buy_price`` and selling at ``sell_price``.

    Raises:
        ValueError: If any input is not a positive finite number
    """
    for name, value in (("buy_price", buy_price), ("sell_price", sell_price), ("quantity", quantity)):
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"{name} must be a positive number, got {value}")

    investment = buy_price * quantity
    sale_value = sell_price * quantity
    pnl = sale_value - investment
    return TradePnl(
        investment=investment,
        sale_value=sale_value,
        pnl=pnl,
        pnl_percent=(pnl / investment) * 100,
    )


def top_assets(assets: Sequence[AssetBalance], limit: int = 5) -> list[AssetBalance]:
    """Assets sorted by value, largest first."""
    return sorted(assets, key=lambda a: a.value, reverse=True)[:limit]


def largest_asset_share(assets: Sequence[AssetBalance], total: float) -> float:
    """Percent of ``total`` held in the single largest asset."""
    if not assets or total <= 0:
        return 0.0
    return max(a.value for a in assets) / total * 100
