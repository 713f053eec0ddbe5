"""Portfolio read models: current summary and period performance."""

from dataclasses import dataclass, field
from enum import Enum

from monitor_core.models import AssetBalance, PerformanceStats
from monitor_core.performance import (
    CapitalPnl,
    capital_pnl,
    largest_asset_share,
    performance_stats,
    top_assets,
)
from monitor_core.protocols import MarketDataSource, MonitorStore
from monitor_core.retention import trailing_change


class PerformancePeriod(str, Enum):
    """Reporting windows and the history they are computed from."""

    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"


class PortfolioUnavailableError(RuntimeError):
    """Market data or portfolio fetch failed."""


@dataclass
class PortfolioSummary:
    assets: list[AssetBalance]
    pnl: CapitalPnl
    top_assets: list[AssetBalance]
    largest_asset_share: float
    weekly_change: tuple[float, float] | None = None
    asset_count: int = field(init=False)

    def __post_init__(self) -> None:
        self.asset_count = len(self.assets)


class PortfolioService:
    """Build portfolio views for the API."""

    def __init__(self, market: MarketDataSource, store: MonitorStore):
        self.market = market
        self.store = store

    async def summary(self) -> PortfolioSummary:
        """Current holdings, PnL against capital and composition.

        Raises:
            PortfolioUnavailableError: If prices or portfolio cannot be fetched
        """
        prices = await self.market.get_market_prices()
        if not prices:
            raise PortfolioUnavailableError("Market prices unavailable")

        portfolio = await self.market.get_portfolio(prices)
        if not portfolio.ok:
            raise PortfolioUnavailableError(portfolio.error)

        capital = await self.store.load_capital()
        history = await self.store.load_history()

        return PortfolioSummary(
            assets=sorted(portfolio.assets, key=lambda a: a.value, reverse=True),
            pnl=capital_pnl(portfolio.total, capital),
            top_assets=top_assets(portfolio.assets),
            largest_asset_share=largest_asset_share(portfolio.assets, portfolio.total),
            weekly_change=trailing_change(history, portfolio.total, days=7),
        )


async def period_performance(store: MonitorStore, period: PerformancePeriod) -> PerformanceStats | None:
    """Statistics over the requested window; None if fewer than 2 points.

    24h uses the last 24 hourly entries; 7d and 30d use daily history.
    """
    if period == PerformancePeriod.DAY:
        hourly = await store.load_hourly_history()
        totals = [e.total for e in hourly[-24:]]
    else:
        days = 7 if period == PerformancePeriod.WEEK else 30
        daily = await store.load_history()
        totals = [e.total for e in daily[-days:]]
    return performance_stats(totals)
