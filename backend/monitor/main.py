"""Main application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import timedelta

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# Reduce noise from third-party libraries (must be set before importing them)
logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine.Engine").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)
logging.getLogger("ccxt").setLevel(logging.WARNING)

import ccxt.async_support as ccxt
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from monitor.api import router
from monitor.api.routes import VERSION
from monitor.clients import OkxMarketClient, TelegramNotifier
from monitor.config import get_settings
from monitor.services import (
    BalanceMonitor,
    MonitorScheduler,
    Notifier,
    PriceAlertMonitor,
    SnapshotService,
)
from monitor.storage import StateRepository, cache, get_database, init_database
from monitor_core.balance_diff import BalanceDiffEngine

logger = logging.getLogger(__name__)

# Global services
market_client: OkxMarketClient | None = None
telegram: TelegramNotifier | None = None
scheduler: MonitorScheduler | None = None


def build_scheduler(
    market,
    store,
    notifier: Notifier,
    settings=None,
) -> MonitorScheduler:
    """Register the four monitoring cycles on a new scheduler."""
    settings = settings or get_settings()

    balance_monitor = BalanceMonitor(
        market, store, notifier,
        engine=BalanceDiffEngine(quote_currency=settings.quote_currency),
    )
    alert_monitor = PriceAlertMonitor(market, store, notifier)
    snapshots = SnapshotService(
        market, store, notifier,
        hourly_retention=timedelta(hours=settings.hourly_retention_hours),
    )

    sched = MonitorScheduler()
    sched.add_task("balance", settings.balance_interval, balance_monitor.run_cycle)
    sched.add_task("price_alerts", settings.alert_interval, alert_monitor.run_cycle)
    sched.add_task(
        "hourly_snapshot",
        settings.hourly_snapshot_interval,
        snapshots.capture_hourly,
        align_to_calendar=settings.align_snapshots_to_calendar,
    )
    sched.add_task(
        "daily_snapshot",
        settings.daily_snapshot_interval,
        snapshots.capture_daily,
        align_to_calendar=settings.align_snapshots_to_calendar,
    )
    return sched


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global market_client, telegram, scheduler

    logger.info("Starting portfolio monitor...")
    settings = get_settings()

    # Track initialization state for proper cleanup on failure
    db_initialized = False
    cache_initialized = False

    try:
        # Initialize database with timeout
        try:
            await asyncio.wait_for(init_database(), timeout=30)
            db_initialized = True
            logger.info("Database initialized")
        except asyncio.TimeoutError:
            raise RuntimeError("Database initialization timed out after 30s")

        # Initialize Redis cache with timeout
        try:
            await asyncio.wait_for(cache.init_cache(), timeout=10)
            cache_initialized = True
            if cache.is_cache_available():
                logger.info("Redis cache initialized")
            else:
                logger.warning("Redis cache unavailable - pending input tracking disabled")
        except asyncio.TimeoutError:
            logger.warning("Redis cache initialization timed out - pending input tracking disabled")
            cache_initialized = True  # Mark as initialized to skip cleanup

        market_client = OkxMarketClient(
            api_key=settings.okx_api_key,
            api_secret=settings.okx_api_secret,
            passphrase=settings.okx_api_passphrase,
            quote_currency=settings.quote_currency,
            candle_timeframe=settings.candle_timeframe,
        )
        # Exchange outages are not fatal; the client reconnects on the next fetch
        try:
            await market_client.connect()
        except ccxt.BaseError as e:
            logger.warning(f"OKX unavailable at startup, will retry from the cycles: {e}")

        telegram = TelegramNotifier(settings.telegram_bot_token)
        notifier = Notifier(telegram, settings.authorized_user_id, settings.target_channel_id)
        store = StateRepository()

        scheduler = build_scheduler(market_client, store, notifier, settings)
        await scheduler.start()

        # Expose collaborators to API routes via app.state
        app.state.market = market_client
        app.state.store = store
        app.state.notifier = notifier
        app.state.scheduler = scheduler

    except Exception as e:
        logger.error(f"Startup failed: {e}")
        # Cleanup on startup failure
        if market_client:
            try:
                await market_client.close()
            except Exception as cleanup_err:
                logger.warning(f"Error closing market client: {cleanup_err}")
        if cache_initialized:
            try:
                await cache.close_cache()
            except Exception as cleanup_err:
                logger.warning(f"Error closing cache: {cleanup_err}")
        if db_initialized:
            try:
                db = get_database()
                await db.close()
            except Exception as cleanup_err:
                logger.warning(f"Error closing database: {cleanup_err}")
        raise  # Re-raise to prevent app from starting in broken state

    yield

    # Shutdown
    logger.info("Shutting down...")

    # Stop cycles first (no more state writes)
    app.state.scheduler = None
    if scheduler:
        await scheduler.stop()

    app.state.market = None
    app.state.notifier = None
    if market_client:
        await market_client.close()
    if telegram:
        await telegram.close()

    # Close Redis cache
    await cache.close_cache()

    # Close database connections
    try:
        db = get_database()
        await db.close()
        logger.info("Database connections closed")
    except Exception as e:
        logger.warning(f"Error closing database: {e}")

    logger.info("Shutdown complete")


# Create FastAPI app with orjson for faster JSON serialization
app = FastAPI(
    title="Portfolio Monitor",
    description="Portfolio monitoring and alerting for a crypto exchange account",
    version=VERSION,
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include REST routes
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Portfolio Monitor",
        "version": VERSION,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "monitor.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
