"""Notification routing and message text."""

import logging

from monitor_core.models import (
    AlertCondition,
    AlertTrigger,
    HeldTradePost,
    MonitorPreferences,
    TradeDirection,
    TradeEvent,
)
from monitor_core.protocols import NotificationSink

logger = logging.getLogger(__name__)


def format_trade_event(event: TradeEvent) -> str:
    emoji = "🟢" if event.direction == TradeDirection.BUY else "🔴"
    action = "Buy" if event.direction == TradeDirection.BUY else "Sell"
    return (
        f"{emoji} *{action} detected*\n\n"
        f"Asset: `{event.asset}`\n"
        f"Quantity: `{event.quantity:,.6f}`\n"
        f"Approx. price: `${event.approx_price:,.4f}`\n"
        f"Value: `${event.notional_value:,.2f}`\n\n"
        f"New balance: `{event.new_balance:,.6f} {event.asset}`"
    )


def format_alert_trigger(trigger: AlertTrigger) -> str:
    alert = trigger.alert
    direction = "above" if alert.condition == AlertCondition.GREATER_THAN else "below"
    return (
        f"🚨 *Price alert*\n\n"
        f"Instrument: `{alert.instrument}`\n"
        f"Current price: `${trigger.current_price:,.4f}`\n"
        f"Target: `{alert.condition.value} ${alert.target_price:,.4f}` ({direction})\n\n"
        f"_The alert has been removed._"
    )


def format_publish_request(post: HeldTradePost) -> str:
    return (
        f"*Publish this trade to the channel?*\n\n"
        f"{post.message}\n\n"
        f"Post id: `{post.id}`"
    )


def format_daily_summary(date_label: str, total: float, change: float, percent: float) -> str:
    emoji = "🟢⬆️" if change >= 0 else "🔴⬇️"
    sign = "+" if change >= 0 else ""
    return (
        f"📊 *Daily summary*\n\n"
        f"Date: `{date_label}`\n"
        f"Portfolio value: `${total:,.2f}`\n"
        f"Daily change: {emoji} `{sign}{change:,.2f}` (`{sign}{percent:,.2f}%`)"
    )


class Notifier:
    """Route messages to the owner or the channel through a sink."""

    def __init__(self, sink: NotificationSink, owner_id: str, channel_id: str = ""):
        self.sink = sink
        self.owner_id = owner_id
        self.channel_id = channel_id

    async def to_owner(self, message: str) -> bool:
        return await self.sink.send(self.owner_id, message)

    async def trade(self, event: TradeEvent, preferences: MonitorPreferences) -> bool:
        """Trades go to the channel when auto-posting is on, else to the owner."""
        message = format_trade_event(event)
        if preferences.auto_post_to_channel and self.channel_id:
            return await self.sink.send(self.channel_id, message)
        return await self.to_owner(message)

    async def alert(self, trigger: AlertTrigger) -> bool:
        return await self.to_owner(format_alert_trigger(trigger))

    async def debug(self, message: str, preferences: MonitorPreferences) -> None:
        logger.debug(message)
        if preferences.debug_mode:
            await self.to_owner(f"🐞 {message}")

    async def review_trade(self, post: HeldTradePost) -> bool:
        """Ask the owner whether a held trade should go to the channel."""
        return await self.to_owner(format_publish_request(post))

    async def publish(self, post: HeldTradePost) -> bool:
        if not self.channel_id:
            return False
        return await self.sink.send(self.channel_id, post.message)
