"""REST API routes."""

import logging
from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from monitor_core.alert_parser import InvalidAlertError, build_alert, parse_alert
from monitor_core.instruments import InvalidInstrumentError, normalize_instrument
from monitor_core.models import (
    AssetBalance,
    HeldTradePost,
    InsufficientData,
    MonitorPreferences,
    MovementAlertSettings,
    PendingInputKind,
    PerformanceStats,
    PriceAlert,
    TrackedCoin,
)
from monitor_core.performance import calculate_trade_pnl
from monitor_core.protocols import MarketDataSource, MonitorStore
from monitor.services import (
    Notifier,
    PerformancePeriod,
    PortfolioService,
    PortfolioUnavailableError,
    period_performance,
    TechnicalAnalysisService,
)
from monitor.storage import StateRepository, cache, pending_input_cache

logger = logging.getLogger(__name__)

router = APIRouter()

VERSION = "0.1.0"


# Request / response models
class SystemStatus(BaseModel):
    """System status response."""

    status: str
    version: str
    active_alerts: int
    cache_available: bool
    tasks: list[dict[str, Any]]


class AlertRequest(BaseModel):
    """Either ``text`` ("BTC-USDT > 50000") or the three fields."""

    text: Optional[str] = None
    instrument: Optional[str] = None
    condition: Optional[str] = None
    target_price: Optional[float] = None


class PercentRequest(BaseModel):
    percent: float = Field(ge=0)


class CapitalRequest(BaseModel):
    amount: float = Field(ge=0)


class CapitalResponse(BaseModel):
    amount: float


class PnlRequest(BaseModel):
    buy_price: float
    sell_price: float
    quantity: float


class PendingInputRequest(BaseModel):
    kind: PendingInputKind


class TrackCoinRequest(BaseModel):
    instrument: str


class AnalysisResponse(BaseModel):
    instrument: str
    sufficient: bool
    rsi: Optional[float] = None
    sma20: Optional[float] = None
    sma50: Optional[float] = None
    message: Optional[str] = None


class PortfolioResponse(BaseModel):
    total: float
    capital: float
    pnl: float
    pnl_percent: float
    asset_count: int
    largest_asset_share: float
    assets: list[AssetBalance]
    top_assets: list[AssetBalance]
    weekly_change: Optional[float] = None
    weekly_change_percent: Optional[float] = None


class PerformanceResponse(BaseModel):
    period: str
    stats: Optional[PerformanceStats] = None


# Dependencies, resolved from app.state so tests can override them
def get_store(request: Request) -> MonitorStore:
    store = getattr(request.app.state, "store", None)
    return store if store is not None else StateRepository()


def get_market(request: Request) -> MarketDataSource:
    market = getattr(request.app.state, "market", None)
    if market is None:
        raise HTTPException(status_code=503, detail="Market data client not available")
    return market


def get_notifier(request: Request) -> Notifier:
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        raise HTTPException(status_code=503, detail="Notifier not available")
    return notifier


@router.get("/status", response_model=SystemStatus)
async def get_status(request: Request, store: MonitorStore = Depends(get_store)):
    """Get system status."""
    scheduler = getattr(request.app.state, "scheduler", None)
    alerts = await store.load_alerts()

    return SystemStatus(
        status="running" if scheduler is not None and scheduler.is_running else "idle",
        version=VERSION,
        active_alerts=len(alerts),
        cache_available=cache.is_cache_available(),
        tasks=[t.to_dict() for t in scheduler.tasks] if scheduler is not None else [],
    )


@router.get("/portfolio", response_model=PortfolioResponse)
async def get_portfolio(
    market: MarketDataSource = Depends(get_market),
    store: MonitorStore = Depends(get_store),
):
    """Current holdings with PnL against invested capital."""
    try:
        summary = await PortfolioService(market, store).summary()
    except PortfolioUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    weekly = summary.weekly_change
    return PortfolioResponse(
        total=summary.pnl.total,
        capital=summary.pnl.capital,
        pnl=summary.pnl.pnl,
        pnl_percent=summary.pnl.pnl_percent,
        asset_count=summary.asset_count,
        largest_asset_share=summary.largest_asset_share,
        assets=summary.assets,
        top_assets=summary.top_assets,
        weekly_change=weekly[0] if weekly else None,
        weekly_change_percent=weekly[1] if weekly else None,
    )


@router.get("/analysis/{instrument}", response_model=AnalysisResponse)
async def get_analysis(instrument: str, market: MarketDataSource = Depends(get_market)):
    """RSI(14), SMA(20) and SMA(50) for an instrument."""
    try:
        symbol = normalize_instrument(instrument)
    except InvalidInstrumentError as e:
        raise HTTPException(status_code=422, detail=str(e))

    result = await TechnicalAnalysisService(market).analyze(symbol)
    if isinstance(result, InsufficientData):
        return AnalysisResponse(instrument=symbol, sufficient=False, message=result.message)

    return AnalysisResponse(
        instrument=symbol,
        sufficient=True,
        rsi=result.rsi,
        sma20=result.sma20,
        sma50=result.sma50,
    )


# -----------------------------------------------------------------------------
# Price alerts
# -----------------------------------------------------------------------------


@router.get("/alerts", response_model=list[PriceAlert])
async def list_alerts(store: MonitorStore = Depends(get_store)):
    return await store.load_alerts()


@router.post("/alerts", response_model=PriceAlert, status_code=201)
async def create_alert(request: AlertRequest, store: MonitorStore = Depends(get_store)):
    """Create a one-shot price alert."""
    try:
        if request.text is not None:
            alert = parse_alert(request.text)
        elif request.instrument and request.condition and request.target_price is not None:
            alert = build_alert(request.instrument, request.condition, request.target_price)
        else:
            raise InvalidAlertError("Provide 'text' or instrument, condition and target_price")
    except InvalidAlertError as e:
        raise HTTPException(status_code=422, detail=str(e))

    await store.add_alert(alert)
    logger.info(f"Alert created: {alert.instrument} {alert.condition.value} {alert.target_price}")
    return alert


@router.delete("/alerts/{alert_id}")
async def delete_alert(alert_id: str, store: MonitorStore = Depends(get_store)):
    if not await store.delete_alert(alert_id):
        raise HTTPException(status_code=404, detail="Alert not found")
    return {"deleted": alert_id}


@router.delete("/alerts")
async def delete_all_alerts(store: MonitorStore = Depends(get_store)):
    alerts = await store.load_alerts()
    await store.save_alerts([])
    logger.info(f"Deleted all {len(alerts)} alert(s)")
    return {"deleted": len(alerts)}


# -----------------------------------------------------------------------------
# Movement alert settings
# -----------------------------------------------------------------------------


@router.get("/alert-settings", response_model=MovementAlertSettings)
async def get_alert_settings(store: MonitorStore = Depends(get_store)):
    return await store.load_alert_settings()


@router.put("/alert-settings/global", response_model=MovementAlertSettings)
async def set_global_movement(request: PercentRequest, store: MonitorStore = Depends(get_store)):
    if request.percent <= 0:
        raise HTTPException(status_code=422, detail="Global percent must be greater than 0")

    settings = (await store.load_alert_settings()).with_global(request.percent)
    await store.save_alert_settings(settings)
    return settings


@router.put("/alert-settings/overrides/{asset}", response_model=MovementAlertSettings)
async def set_asset_movement(
    asset: str,
    request: PercentRequest,
    store: MonitorStore = Depends(get_store),
):
    """Set a per-asset override; 0 removes it."""
    settings = (await store.load_alert_settings()).with_override(asset, request.percent)
    await store.save_alert_settings(settings)
    return settings


# -----------------------------------------------------------------------------
# Capital and preferences
# -----------------------------------------------------------------------------


@router.get("/capital", response_model=CapitalResponse)
async def get_capital(store: MonitorStore = Depends(get_store)):
    return CapitalResponse(amount=await store.load_capital())


@router.put("/capital", response_model=CapitalResponse)
async def set_capital(request: CapitalRequest, store: MonitorStore = Depends(get_store)):
    await store.save_capital(request.amount)
    return CapitalResponse(amount=request.amount)


@router.get("/preferences", response_model=MonitorPreferences)
async def get_preferences(store: MonitorStore = Depends(get_store)):
    return await store.load_preferences()


@router.put("/preferences", response_model=MonitorPreferences)
async def set_preferences(request: MonitorPreferences, store: MonitorStore = Depends(get_store)):
    await store.save_preferences(request)
    return request


# -----------------------------------------------------------------------------
# Performance and calculators
# -----------------------------------------------------------------------------


@router.get("/performance", response_model=PerformanceResponse)
async def get_performance(
    period: PerformancePeriod = Query(PerformancePeriod.DAY),
    store: MonitorStore = Depends(get_store),
):
    stats = await period_performance(store, period)
    return PerformanceResponse(period=period.value, stats=stats)


@router.post("/pnl")
async def trade_pnl(request: PnlRequest):
    """PnL of a hypothetical buy and sell."""
    try:
        result = calculate_trade_pnl(request.buy_price, request.sell_price, request.quantity)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return asdict(result)


# -----------------------------------------------------------------------------
# Per-user pending input
# -----------------------------------------------------------------------------


@router.get("/sessions/{user_id}/pending-input")
async def get_pending_input(user_id: str):
    pending = await pending_input_cache.get_pending(user_id)
    if pending is None:
        raise HTTPException(status_code=404, detail="No pending input")
    return pending.model_dump(mode="json")


@router.put("/sessions/{user_id}/pending-input")
async def set_pending_input(user_id: str, request: PendingInputRequest):
    pending = await pending_input_cache.set_pending(user_id, request.kind)
    if pending is None:
        raise HTTPException(status_code=503, detail="Session cache not available")
    return pending.model_dump(mode="json")


@router.delete("/sessions/{user_id}/pending-input")
async def clear_pending_input(user_id: str):
    return {"cleared": await pending_input_cache.clear_pending(user_id)}


# -----------------------------------------------------------------------------
# Tracked coins
# -----------------------------------------------------------------------------


@router.get("/tracked-coins", response_model=list[TrackedCoin])
async def list_tracked_coins(store: MonitorStore = Depends(get_store)):
    return await store.load_tracked_coins()


@router.post("/tracked-coins", response_model=TrackedCoin, status_code=201)
async def track_coin(request: TrackCoinRequest, store: MonitorStore = Depends(get_store)):
    try:
        coin = TrackedCoin(instrument=normalize_instrument(request.instrument))
    except InvalidInstrumentError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if not await store.add_tracked_coin(coin):
        raise HTTPException(status_code=409, detail=f"{coin.instrument} is already tracked")
    logger.info(f"Tracking {coin.instrument}")
    return coin


@router.delete("/tracked-coins/{instrument}")
async def untrack_coin(instrument: str, store: MonitorStore = Depends(get_store)):
    symbol = instrument.strip().upper()
    if not await store.remove_tracked_coin(symbol):
        raise HTTPException(status_code=404, detail=f"{symbol} is not tracked")
    return {"deleted": symbol}


# -----------------------------------------------------------------------------
# Held trade posts
# -----------------------------------------------------------------------------


@router.get("/trades/held", response_model=list[HeldTradePost])
async def list_held_trades(store: MonitorStore = Depends(get_store)):
    return await store.load_held_posts()


@router.post("/trades/{post_id}/publish")
async def publish_trade(
    post_id: str,
    store: MonitorStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
):
    """Send a held trade message to the channel."""
    if not notifier.channel_id:
        raise HTTPException(status_code=503, detail="No target channel configured")

    post = await store.take_held_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Held trade not found")

    if not await notifier.publish(post):
        # Keep it so the owner can try again
        await store.hold_post(post)
        raise HTTPException(status_code=502, detail="Failed to post to the channel")

    logger.info(f"Published held trade {post.id} ({post.asset})")
    return {"published": post.id}


@router.delete("/trades/{post_id}")
async def ignore_trade(post_id: str, store: MonitorStore = Depends(get_store)):
    if await store.take_held_post(post_id) is None:
        raise HTTPException(status_code=404, detail="Held trade not found")
    return {"ignored": post_id}


# -----------------------------------------------------------------------------
# Data reset
# -----------------------------------------------------------------------------


@router.delete("/data")
async def delete_all_data(
    confirm: bool = Query(False),
    store: MonitorStore = Depends(get_store),
):
    """Delete every stored record. Irreversible, so ``confirm=true`` is required."""
    if not confirm:
        raise HTTPException(status_code=400, detail="Pass confirm=true to delete all data")

    await store.clear_all()
    return {"cleared": True}
