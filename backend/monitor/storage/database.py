"""Database connection and table definitions."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from monitor.config import get_settings

Base = declarative_base()


class AppStateTable(Base):
    """Singleton records (balance baseline, settings, capital) keyed by name."""

    __tablename__ = "app_state"

    key = Column(String(50), primary_key=True)
    value = Column(JSONB, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=text("NOW()"), onupdate=text("NOW()"))


class PriceAlertTable(Base):
    """Active one-shot price alerts."""

    __tablename__ = "price_alerts"

    id = Column(String(36), primary_key=True)
    instrument = Column(String(40), nullable=False)
    condition = Column(String(1), nullable=False)  # '>' | '<'
    target_price = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_price_alerts_instrument", "instrument"),
    )


class DailyHistoryTable(Base):
    """Daily portfolio totals (append-only)."""

    __tablename__ = "daily_history"

    date = Column(Date, primary_key=True)
    total = Column(Float, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)


class HourlyHistoryTable(Base):
    """Hourly portfolio totals (pruned to the retention window)."""

    __tablename__ = "hourly_history"

    timestamp = Column(DateTime(timezone=True), primary_key=True)
    total = Column(Float, nullable=False)
    hour = Column(Integer, nullable=False)


class TrackedCoinTable(Base):
    """Instruments on the owner's watch list."""

    __tablename__ = "tracked_coins"

    instrument = Column(String(40), primary_key=True)
    added_at = Column(DateTime(timezone=True), nullable=False)


class HeldTradePostTable(Base):
    """Trade messages awaiting a publish or ignore decision."""

    __tablename__ = "held_trade_posts"

    id = Column(String(36), primary_key=True)
    asset = Column(String(20), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class Database:
    """Database connection manager."""

    def __init__(self, database_url: str | None = None):
        settings = get_settings()
        url = database_url or settings.database_url

        # Convert postgresql:// to postgresql+asyncpg://
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

        # Four low-frequency cycles plus API reads; a small pool is enough
        self.engine = create_async_engine(
            url,
            echo=settings.debug,
            pool_size=5,
            max_overflow=5,
            pool_pre_ping=True,
            pool_recycle=3600,
            pool_timeout=30,
            connect_args={
                "timeout": 10,
                "command_timeout": 60,
            },
        )
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_tables(self) -> None:
        """Create all tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session.

        Commits on success, rolls back everything on error, so each
        ``async with`` block is all-or-nothing.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Close database connection."""
        await self.engine.dispose()


# Global database instance
_db: Database | None = None


def get_database() -> Database:
    """Get the global database instance."""
    global _db
    if _db is None:
        _db = Database()
    return _db


async def init_database() -> Database:
    """Initialize the database and create tables."""
    db = get_database()
    await db.create_tables()
    return db
