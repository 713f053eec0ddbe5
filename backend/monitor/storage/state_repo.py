"""Monitor state repository (singletons, alerts, history)."""

import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert

from monitor_core.models import (
    AlertCondition,
    BalanceState,
    DailyHistoryEntry,
    HeldTradePost,
    HourlyHistoryEntry,
    MonitorPreferences,
    MovementAlertSettings,
    PriceAlert,
    TrackedCoin,
)
from monitor.config import get_settings
from monitor.storage.database import (
    AppStateTable,
    DailyHistoryTable,
    HeldTradePostTable,
    HourlyHistoryTable,
    PriceAlertTable,
    TrackedCoinTable,
    get_database,
)

logger = logging.getLogger(__name__)

# Singleton keys in app_state
KEY_BALANCE_STATE = "balance_state"
KEY_ALERT_SETTINGS = "alert_settings"
KEY_PREFERENCES = "preferences"
KEY_CAPITAL = "capital"


class StateRepository:
    """PostgreSQL-backed store for all monitor state.

    Every write replaces a record (or a whole list) inside one session,
    so readers only ever see the state before or after a write.
    """

    # -------------------------------------------------------------------------
    # Singleton records
    # -------------------------------------------------------------------------

    async def _get_value(self, key: str) -> Any | None:
        async with get_database().session() as session:
            stmt = select(AppStateTable.value).where(AppStateTable.key == key)
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def _set_value(self, key: str, value: Any) -> None:
        async with get_database().session() as session:
            stmt = insert(AppStateTable).values(key=key, value=value)
            stmt = stmt.on_conflict_do_update(
                index_elements=["key"],
                set_={"value": stmt.excluded.value},
            )
            await session.execute(stmt)

    async def load_balance_state(self) -> BalanceState:
        data = await self._get_value(KEY_BALANCE_STATE)
        if data is None:
            return BalanceState()
        return BalanceState.model_validate(data)

    async def save_balance_state(self, state: BalanceState) -> None:
        await self._set_value(KEY_BALANCE_STATE, state.model_dump(mode="json"))

    async def load_alert_settings(self) -> MovementAlertSettings:
        data = await self._get_value(KEY_ALERT_SETTINGS)
        if data is None:
            return MovementAlertSettings(global_percent=get_settings().default_movement_percent)
        return MovementAlertSettings.model_validate(data)

    async def save_alert_settings(self, settings: MovementAlertSettings) -> None:
        await self._set_value(KEY_ALERT_SETTINGS, settings.model_dump(mode="json"))

    async def load_preferences(self) -> MonitorPreferences:
        data = await self._get_value(KEY_PREFERENCES)
        if data is None:
            return MonitorPreferences()
        return MonitorPreferences.model_validate(data)

    async def save_preferences(self, preferences: MonitorPreferences) -> None:
        await self._set_value(KEY_PREFERENCES, preferences.model_dump(mode="json"))

    async def load_capital(self) -> float:
        data = await self._get_value(KEY_CAPITAL)
        if data is None:
            return 0.0
        return float(data.get("amount", 0))

    async def save_capital(self, amount: float) -> None:
        await self._set_value(KEY_CAPITAL, {"amount": amount})

    # -------------------------------------------------------------------------
    # Price alerts
    # -------------------------------------------------------------------------

    @staticmethod
    def _row_to_alert(row: PriceAlertTable) -> PriceAlert:
        return PriceAlert(
            id=row.id,
            instrument=row.instrument,
            condition=AlertCondition(row.condition),
            target_price=row.target_price,
            created_at=row.created_at,
        )

    @staticmethod
    def _alert_values(alert: PriceAlert) -> dict:
        return {
            "id": alert.id,
            "instrument": alert.instrument,
            "condition": alert.condition.value,
            "target_price": alert.target_price,
            "created_at": alert.created_at,
        }

    async def load_alerts(self) -> list[PriceAlert]:
        async with get_database().session() as session:
            stmt = select(PriceAlertTable).order_by(PriceAlertTable.created_at.asc())
            result = await session.execute(stmt)
            return [self._row_to_alert(row) for row in result.scalars().all()]

    async def add_alert(self, alert: PriceAlert) -> None:
        async with get_database().session() as session:
            await session.execute(insert(PriceAlertTable).values(**self._alert_values(alert)))

    async def delete_alert(self, alert_id: str) -> bool:
        async with get_database().session() as session:
            result = await session.execute(
                delete(PriceAlertTable).where(PriceAlertTable.id == alert_id)
            )
            return result.rowcount > 0

    async def save_alerts(self, alerts: list[PriceAlert]) -> None:
        async with get_database().session() as session:
            await session.execute(delete(PriceAlertTable))
            if alerts:
                await session.execute(
                    insert(PriceAlertTable),
                    [self._alert_values(a) for a in alerts],
                )

    async def remove_alerts(self, alert_ids: list[str]) -> int:
        if not alert_ids:
            return 0
        async with get_database().session() as session:
            result = await session.execute(
                delete(PriceAlertTable).where(PriceAlertTable.id.in_(alert_ids))
            )
            return result.rowcount

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    async def load_history(self) -> list[DailyHistoryEntry]:
        async with get_database().session() as session:
            stmt = select(DailyHistoryTable).order_by(DailyHistoryTable.date.asc())
            result = await session.execute(stmt)
            return [
                DailyHistoryEntry(date=row.date, total=row.total, timestamp=row.timestamp)
                for row in result.scalars().all()
            ]

    async def append_history(self, entry: DailyHistoryEntry) -> None:
        async with get_database().session() as session:
            stmt = insert(DailyHistoryTable).values(
                date=entry.date,
                total=entry.total,
                timestamp=entry.timestamp,
            )
            # A restart can fire the daily cycle twice on one date; the first entry stays
            await session.execute(stmt.on_conflict_do_nothing(index_elements=["date"]))

    async def load_hourly_history(self) -> list[HourlyHistoryEntry]:
        async with get_database().session() as session:
            stmt = select(HourlyHistoryTable).order_by(HourlyHistoryTable.timestamp.asc())
            result = await session.execute(stmt)
            return [
                HourlyHistoryEntry(timestamp=row.timestamp, total=row.total, hour=row.hour)
                for row in result.scalars().all()
            ]

    async def append_hourly_history(self, entry: HourlyHistoryEntry) -> None:
        async with get_database().session() as session:
            stmt = insert(HourlyHistoryTable).values(
                timestamp=entry.timestamp,
                total=entry.total,
                hour=entry.hour,
            )
            await session.execute(stmt.on_conflict_do_nothing(index_elements=["timestamp"]))

    async def save_hourly_history(self, entries: list[HourlyHistoryEntry]) -> None:
        async with get_database().session() as session:
            await session.execute(delete(HourlyHistoryTable))
            if entries:
                await session.execute(
                    insert(HourlyHistoryTable),
                    [
                        {"timestamp": e.timestamp, "total": e.total, "hour": e.hour}
                        for e in entries
                    ],
                )

    # -------------------------------------------------------------------------
    # Tracked coins and held trade posts
    # -------------------------------------------------------------------------

    async def load_tracked_coins(self) -> list[TrackedCoin]:
        async with get_database().session() as session:
            stmt = select(TrackedCoinTable).order_by(TrackedCoinTable.added_at.asc())
            result = await session.execute(stmt)
            return [
                TrackedCoin(instrument=row.instrument, added_at=row.added_at)
                for row in result.scalars().all()
            ]

    async def add_tracked_coin(self, coin: TrackedCoin) -> bool:
        async with get_database().session() as session:
            stmt = insert(TrackedCoinTable).values(
                instrument=coin.instrument,
                added_at=coin.added_at,
            )
            result = await session.execute(
                stmt.on_conflict_do_nothing(index_elements=["instrument"])
            )
            return result.rowcount > 0

    async def remove_tracked_coin(self, instrument: str) -> bool:
        async with get_database().session() as session:
            result = await session.execute(
                delete(TrackedCoinTable).where(TrackedCoinTable.instrument == instrument)
            )
            return result.rowcount > 0

    async def load_held_posts(self) -> list[HeldTradePost]:
        async with get_database().session() as session:
            stmt = select(HeldTradePostTable).order_by(HeldTradePostTable.created_at.asc())
            result = await session.execute(stmt)
            return [
                HeldTradePost(
                    id=row.id,
                    asset=row.asset,
                    message=row.message,
                    created_at=row.created_at,
                )
                for row in result.scalars().all()
            ]

    async def hold_post(self, post: HeldTradePost) -> None:
        async with get_database().session() as session:
            await session.execute(
                insert(HeldTradePostTable).values(
                    id=post.id,
                    asset=post.asset,
                    message=post.message,
                    created_at=post.created_at,
                )
            )

    async def take_held_post(self, post_id: str) -> HeldTradePost | None:
        async with get_database().session() as session:
            stmt = (
                delete(HeldTradePostTable)
                .where(HeldTradePostTable.id == post_id)
                .returning(
                    HeldTradePostTable.asset,
                    HeldTradePostTable.message,
                    HeldTradePostTable.created_at,
                )
            )
            row = (await session.execute(stmt)).one_or_none()
            if row is None:
                return None
            return HeldTradePost(
                id=post_id,
                asset=row.asset,
                message=row.message,
                created_at=row.created_at,
            )

    async def clear_all(self) -> None:
        async with get_database().session() as session:
            for table in (
                AppStateTable,
                PriceAlertTable,
                DailyHistoryTable,
                HourlyHistoryTable,
                TrackedCoinTable,
                HeldTradePostTable,
            ):
                await session.execute(delete(table))
        logger.warning("All monitor data deleted")
