"""Redis cache for short-lived session state.

Holds per-user pending-input entries, each under its own key with a
TTL. Values are JSON encoded with orjson.

Redis is optional: if it is unreachable at startup the cache stays
disabled, reads miss and writes report False.
"""

from __future__ import annotations

import logging
from typing import Any

import orjson
import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from monitor.config import get_settings

logger = logging.getLogger(__name__)

_pool: ConnectionPool | None = None
_client: redis.Redis | None = None

KEY_PREFIX_PENDING_INPUT = "pending_input:"  # pending_input:{user_id}


async def init_cache() -> None:
    """Connect to Redis, leaving the cache disabled if it does not answer."""
    global _pool, _client

    if _client is not None:
        return

    settings = get_settings()
    _pool = ConnectionPool.from_url(settings.redis_url, max_connections=5)
    _client = redis.Redis(connection_pool=_pool)

    try:
        await _client.ping()
        logger.info(f"Redis connected: {settings.redis_url}")
    except redis.RedisError as e:
        logger.warning(f"Redis connection failed: {e}. Session cache disabled.")
        await _pool.disconnect()
        _client = None
        _pool = None


async def close_cache() -> None:
    global _pool, _client

    if _client is not None:
        await _client.aclose()
        _client = None
    if _pool is not None:
        await _pool.disconnect()
        _pool = None


def is_cache_available() -> bool:
    return _client is not None


async def get_json(key: str) -> Any | None:
    """Decoded value at ``key``, or None on a miss or any cache error."""
    if _client is None:
        return None

    try:
        raw = await _client.get(key)
    except redis.RedisError as e:
        logger.warning(f"Redis GET {key} failed: {e}")
        return None

    if raw is None:
        return None
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        logger.warning(f"Undecodable value at {key}: {e}")
        return None


async def set_json(key: str, value: Any, ttl: int | None = None) -> bool:
    """Store ``value`` at ``key``, expiring after ``ttl`` seconds if given."""
    if _client is None:
        return False

    try:
        await _client.set(key, orjson.dumps(value), ex=ttl)
        return True
    except (TypeError, orjson.JSONEncodeError) as e:
        logger.warning(f"Cannot encode value for {key}: {e}")
    except redis.RedisError as e:
        logger.warning(f"Redis SET {key} failed: {e}")
    return False


async def delete(key: str) -> bool:
    """Delete ``key``. True if it existed."""
    if _client is None:
        return False

    try:
        return await _client.delete(key) > 0
    except redis.RedisError as e:
        logger.warning(f"Redis DELETE {key} failed: {e}")
        return False
