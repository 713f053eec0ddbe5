"""User preference and conversation-state models."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MonitorPreferences(BaseModel):
    """Owner-level toggles for notifications."""

    daily_summary: bool = False
    auto_post_to_channel: bool = False
    debug_mode: bool = False


class PendingInputKind(str, Enum):
    """What a user's next free-text message is expected to contain."""

    SET_ALERT = "set_alert"
    SET_CAPITAL = "set_capital"
    SET_GLOBAL_MOVEMENT = "set_global_movement"
    SET_ASSET_MOVEMENT = "set_asset_movement"
    COIN_INFO = "coin_info"
    TRACK_COIN = "track_coin"
    UNTRACK_COIN = "untrack_coin"
    PNL_CALCULATOR = "pnl_calculator"
    CONFIRM_DELETE_ALL = "confirm_delete_all"


class PendingInput(BaseModel):
    """Pending-input state for one user."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    kind: PendingInputKind
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TrackedCoin(BaseModel):
    """Instrument on the owner's watch list."""

    model_config = ConfigDict(frozen=True)

    instrument: str
    added_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
