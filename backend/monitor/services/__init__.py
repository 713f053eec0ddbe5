"""Monitoring services."""

from monitor.services.alert_monitor import PriceAlertMonitor
from monitor.services.analysis_service import TechnicalAnalysisService
from monitor.services.balance_monitor import BalanceMonitor
from monitor.services.notifications import Notifier
from monitor.services.portfolio_service import (
    PerformancePeriod,
    PortfolioService,
    PortfolioSummary,
    PortfolioUnavailableError,
    period_performance,
)
from monitor.services.scheduler import MonitorScheduler, PeriodicTask
from monitor.services.snapshot_service import SnapshotService

__all__ = [
    "PriceAlertMonitor",
    "TechnicalAnalysisService",
    "BalanceMonitor",
    "Notifier",
    "PerformancePeriod",
    "PortfolioService",
    "PortfolioSummary",
    "PortfolioUnavailableError",
    "period_performance",
    "MonitorScheduler",
    "PeriodicTask",
    "SnapshotService",
]
