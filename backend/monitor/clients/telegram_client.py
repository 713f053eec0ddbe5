"""Telegram Bot API client used as the notification sink."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Send Markdown messages through the Telegram Bot API.

    Delivery is fire-and-forget: failures are logged and reported as
    False, never raised and never retried.
    """

    BASE_URL = "https://api.telegram.org"

    def __init__(self, bot_token: str, timeout: float = 15.0):
        self.bot_token = bot_token
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, payload: dict[str, Any]) -> Any:
        client = await self._get_client()
        response = await client.post(f"/bot{self.bot_token}/{method}", json=payload)
        response.raise_for_status()
        return response.json()

    async def send(self, recipient: str, message: str) -> bool:
        """Send ``message`` to a chat or channel id.

        Returns:
            True if Telegram accepted the message
        """
        if not self.bot_token or not recipient:
            logger.warning("Telegram not configured, dropping message")
            return False

        try:
            data = await self._request(
                "sendMessage",
                {"chat_id": recipient, "text": message, "parse_mode": "Markdown"},
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Telegram send to {recipient} failed: {e}")
            return False

        if not data.get("ok", False):
            logger.error(f"Telegram rejected message to {recipient}: {data.get('description')}")
            return False
        return True
