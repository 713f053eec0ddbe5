"""External API clients."""

from monitor.clients.okx_client import OkxMarketClient
from monitor.clients.telegram_client import TelegramNotifier

__all__ = ["OkxMarketClient", "TelegramNotifier"]
