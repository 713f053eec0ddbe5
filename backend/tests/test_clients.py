"""Tests for the OKX market client and Telegram notifier."""

import json
from unittest.mock import AsyncMock, MagicMock

import ccxt.async_support as ccxt
import httpx
import pytest

from monitor.clients import OkxMarketClient, TelegramNotifier


class TestOkxMarketClient:
    """Tests for OkxMarketClient with a mocked ccxt exchange."""

    @pytest.fixture
    def exchange(self):
        exchange = MagicMock()
        exchange.fetch_tickers = AsyncMock(return_value={
            "BTC/USDT": {"last": 50000.0},
            "ETH/USDT": {"last": 3000.0},
            "DEAD/USDT": {"last": None},
        })
        exchange.fetch_balance = AsyncMock(return_value={
            "total": {"BTC": 0.5, "USDT": 100.0, "XYZ": 3.0, "DUST": 0.0},
        })
        exchange.fetch_ohlcv = AsyncMock(return_value=[
            [3, 0, 0, 0, 12.0, 0],
            [1, 0, 0, 0, 10.0, 0],
            [2, 0, 0, 0, 11.0, 0],
        ])
        exchange.close = AsyncMock()
        return exchange

    @pytest.fixture
    def client(self, exchange):
        client = OkxMarketClient(
            api_key="key", api_secret="secret", passphrase="pass",
            quote_currency="USDT", candle_timeframe="1d",
        )
        client._exchange = exchange
        return client

    @pytest.mark.asyncio
    async def test_market_prices(self, client):
        prices = await client.get_market_prices()
        assert prices == {"BTC-USDT": 50000.0, "ETH-USDT": 3000.0}

    @pytest.mark.asyncio
    async def test_market_prices_failure(self, client, exchange):
        exchange.fetch_tickers.side_effect = ccxt.NetworkError("timeout")
        assert await client.get_market_prices() == {}

    @pytest.mark.asyncio
    async def test_portfolio(self, client):
        portfolio = await client.get_portfolio({"BTC-USDT": 50000.0})

        assert portfolio.ok
        by_asset = {a.asset: a for a in portfolio.assets}
        assert set(by_asset) == {"BTC", "USDT", "XYZ"}
        assert by_asset["BTC"].value == pytest.approx(25000.0)
        assert by_asset["USDT"].price == 1.0
        assert by_asset["XYZ"].value == 0.0
        assert portfolio.total == pytest.approx(25100.0)

    @pytest.mark.asyncio
    async def test_portfolio_failure(self, client, exchange):
        exchange.fetch_balance.side_effect = ccxt.AuthenticationError("bad key")

        portfolio = await client.get_portfolio({})

        assert not portfolio.ok
        assert "bad key" in portfolio.error

    @pytest.mark.asyncio
    async def test_candles_sorted_oldest_first(self, client, exchange):
        closes = await client.get_historical_candles("BTC-USDT", 51)

        assert closes == [10.0, 11.0, 12.0]
        exchange.fetch_ohlcv.assert_awaited_once_with("BTC/USDT", timeframe="1d", limit=51)

    @pytest.mark.asyncio
    async def test_candles_failure(self, client, exchange):
        exchange.fetch_ohlcv.side_effect = ccxt.ExchangeError("bad symbol")
        assert await client.get_historical_candles("NOPE-USDT", 51) == []

    @pytest.mark.asyncio
    async def test_close(self, client, exchange):
        await client.close()
        exchange.close.assert_awaited_once()
        assert client._exchange is None


class TestTelegramNotifier:
    """Tests for TelegramNotifier with a mock HTTP transport."""

    def make_notifier(self, handler) -> TelegramNotifier:
        notifier = TelegramNotifier("TOKEN")
        notifier._client = httpx.AsyncClient(
            base_url=TelegramNotifier.BASE_URL,
            transport=httpx.MockTransport(handler),
        )
        return notifier

    @pytest.mark.asyncio
    async def test_send_success(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"ok": True, "result": {}})

        notifier = self.make_notifier(handler)
        assert await notifier.send("1001", "*hello*") is True

        assert requests[0].url.path == "/botTOKEN/sendMessage"
        body = json.loads(requests[0].content)
        assert body == {"chat_id": "1001", "text": "*hello*", "parse_mode": "Markdown"}
        await notifier.close()

    @pytest.mark.asyncio
    async def test_send_http_error(self):
        notifier = self.make_notifier(lambda request: httpx.Response(500))
        assert await notifier.send("1001", "hi") is False
        await notifier.close()

    @pytest.mark.asyncio
    async def test_send_rejected(self):
        notifier = self.make_notifier(
            lambda request: httpx.Response(200, json={"ok": False, "description": "chat not found"})
        )
        assert await notifier.send("1001", "hi") is False
        await notifier.close()

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        assert await TelegramNotifier("").send("1001", "hi") is False
        assert await TelegramNotifier("TOKEN").send("", "hi") is False
