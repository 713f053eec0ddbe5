"""On-demand technical analysis for one instrument."""

import logging

from monitor_core.indicators import IndicatorCalculator
from monitor_core.models import IndicatorAnalysis, InsufficientData
from monitor_core.protocols import MarketDataSource

logger = logging.getLogger(__name__)


class TechnicalAnalysisService:
    """Fetch recent closes and compute RSI(14), SMA(20) and SMA(50)."""

    def __init__(
        self,
        market: MarketDataSource,
        calculator: IndicatorCalculator | None = None,
    ):
        self.market = market
        self.calculator = calculator or IndicatorCalculator()

    async def analyze(self, instrument: str) -> IndicatorAnalysis | InsufficientData:
        """Analyze ``instrument``.

        A short or failed candle fetch yields InsufficientData; partial
        indicator sets are never returned.
        """
        closes = await self.market.get_historical_candles(
            instrument, self.calculator.required_points
        )
        result = self.calculator.calculate(instrument, closes)
        if isinstance(result, InsufficientData):
            logger.info(result.message)
        return result
