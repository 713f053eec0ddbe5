"""Per-user pending-input state.

Tracks, per user, what the next free-text message is expected to be
(an alert definition, a capital amount, ...). Each user has an
independent key with its own TTL, so one user's state never leaks into
another's and stale expectations expire on their own.

Data structure:
- pending_input:{user_id} -> JSON {user_id, kind, created_at}
"""

from __future__ import annotations

import logging

from monitor_core.models import PendingInput, PendingInputKind
from monitor.config import get_settings
from monitor.storage import cache

logger = logging.getLogger(__name__)


def _pending_key(user_id: str) -> str:
    """Get the cache key for a user's pending input."""
    return f"{cache.KEY_PREFIX_PENDING_INPUT}{user_id}"


async def set_pending(
    user_id: str,
    kind: PendingInputKind,
    ttl: int | None = None,
) -> PendingInput | None:
    """Record that ``user_id`` is expected to send input of ``kind``.

    Replaces any previous expectation for the same user.

    Returns:
        The stored PendingInput, or None if the cache is unavailable
    """
    if not cache.is_cache_available():
        return None

    pending = PendingInput(user_id=user_id, kind=kind)
    stored = await cache.set_json(
        _pending_key(user_id),
        pending.model_dump(mode="json"),
        ttl=ttl or get_settings().pending_input_ttl,
    )
    return pending if stored else None


async def get_pending(user_id: str) -> PendingInput | None:
    """Get the pending input for a user without clearing it."""
    if not cache.is_cache_available():
        return None

    data = await cache.get_json(_pending_key(user_id))
    if data is None:
        return None

    try:
        return PendingInput.model_validate(data)
    except ValueError as e:
        logger.warning(f"Discarding malformed pending input for {user_id}: {e}")
        await cache.delete(_pending_key(user_id))
        return None


async def pop_pending(user_id: str) -> PendingInput | None:
    """Get and clear the pending input for a user."""
    pending = await get_pending(user_id)
    if pending is not None:
        await clear_pending(user_id)
    return pending


async def clear_pending(user_id: str) -> bool:
    """Clear the pending input for a user."""
    if not cache.is_cache_available():
        return False

    return await cache.delete(_pending_key(user_id))
