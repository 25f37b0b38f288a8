"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from guardian.redis_client import get_redis as _get_redis


async def get_redis_dep() -> AsyncGenerator[object, None]:
    """Yield the Redis client, or None when Redis is not configured (events are then dropped)."""
    try:
        client = _get_redis()
    except RuntimeError:
        client = None
    yield client
