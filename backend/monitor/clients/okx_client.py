"""OKX market data and account client using ccxt."""

import logging

import ccxt.async_support as ccxt

from monitor_core.models import AssetBalance, Portfolio
from monitor.config import get_settings

logger = logging.getLogger(__name__)


class OkxMarketClient:
    """
    Poll-based market data for the monitoring cycles.

    Every fetch is fail-soft: exchange and network errors are logged and
    surface as an empty result (or ``Portfolio.error``) so that the
    calling cycle can skip cleanly.

    Instruments use the OKX ``BASE-QUOTE`` form (e.g. ``BTC-USDT``).
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_secret: str | None = None,
        passphrase: str | None = None,
        quote_currency: str | None = None,
        candle_timeframe: str | None = None,
    ):
        """
        Args:
            api_key: OKX API key (from settings if None)
            api_secret: OKX API secret (from settings if None)
            passphrase: OKX API passphrase (from settings if None)
            quote_currency: Currency used to value holdings (from settings if None)
            candle_timeframe: Candle size for technical analysis (from settings if None)
        """
        settings = get_settings()
        self._api_key = api_key or settings.okx_api_key
        self._api_secret = api_secret or settings.okx_api_secret
        self._passphrase = passphrase or settings.okx_api_passphrase
        self.quote_currency = quote_currency or settings.quote_currency
        self.candle_timeframe = candle_timeframe or settings.candle_timeframe

        self._exchange: ccxt.okx | None = None

    async def connect(self) -> None:
        """Initialize connection to exchange."""
        if self._exchange:
            return

        exchange = ccxt.okx({
            "apiKey": self._api_key,
            "secret": self._api_secret,
            "password": self._passphrase,
            "enableRateLimit": True,
            "options": {
                "defaultType": "spot",
            },
        })
        try:
            await exchange.load_markets()
        except ccxt.BaseError:
            await exchange.close()
            raise

        self._exchange = exchange
        logger.info(f"Loaded {len(exchange.markets)} OKX markets")

    async def close(self) -> None:
        """Close exchange connection."""
        if self._exchange:
            await self._exchange.close()
            self._exchange = None

    def instrument_for(self, asset: str) -> str:
        return f"{asset}-{self.quote_currency}"

    @staticmethod
    def _to_instrument(symbol: str) -> str:
        """ccxt unified symbol to OKX instrument id: BTC/USDT -> BTC-USDT."""
        return symbol.split(":")[0].replace("/", "-")

    @staticmethod
    def _to_symbol(instrument: str) -> str:
        """OKX instrument id to ccxt unified symbol: BTC-USDT -> BTC/USDT."""
        return instrument.replace("-", "/", 1)

    async def get_market_prices(self) -> dict[str, float]:
        """Last traded price for every spot instrument.

        Returns:
            Dict mapping instrument to price, empty on failure
        """
        try:
            if not self._exchange:
                await self.connect()
            tickers = await self._exchange.fetch_tickers()
        except ccxt.BaseError as e:
            logger.warning(f"Failed to fetch OKX tickers: {e}")
            return {}

        prices: dict[str, float] = {}
        for symbol, ticker in tickers.items():
            last = ticker.get("last")
            if last is None:
                continue
            prices[self._to_instrument(symbol)] = float(last)
        return prices

    async def get_portfolio(self, prices: dict[str, float]) -> Portfolio:
        """Current holdings valued at ``prices``.

        The quote currency is valued at 1. Assets without a price are kept
        with a zero value so balance diffing still sees them.
        """
        try:
            if not self._exchange:
                await self.connect()
            balance = await self._exchange.fetch_balance()
        except ccxt.BaseError as e:
            logger.warning(f"Failed to fetch OKX balance: {e}")
            return Portfolio(error=f"Failed to fetch balance: {e}")

        assets: list[AssetBalance] = []
        total = 0.0
        for currency, amount in (balance.get("total") or {}).items():
            if not amount or amount <= 0:
                continue
            if currency == self.quote_currency:
                price = 1.0
            else:
                price = prices.get(self.instrument_for(currency), 0.0)
            value = amount * price
            total += value
            assets.append(
                AssetBalance(asset=currency, amount=float(amount), price=price, value=value)
            )

        return Portfolio(assets=assets, total=total)

    async def get_historical_candles(self, instrument: str, count: int) -> list[float]:
        """Most recent ``count`` candle closes, oldest first.

        Returns:
            List of closes (possibly shorter than ``count``), empty on failure
        """
        try:
            if not self._exchange:
                await self.connect()
            ohlcv = await self._exchange.fetch_ohlcv(
                self._to_symbol(instrument),
                timeframe=self.candle_timeframe,
                limit=count,
            )
        except ccxt.BaseError as e:
            logger.warning(f"Failed to fetch candles for {instrument}: {e}")
            return []

        # [timestamp, open, high, low, close, volume]
        closes = [float(row[4]) for row in sorted(ohlcv, key=lambda r: r[0])]
        return closes[-count:]
