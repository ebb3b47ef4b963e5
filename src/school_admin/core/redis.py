"""
Redis Connection

Holds the client behind the SAFT export rate limit. The client is
published only after a successful ping, so ``redis_client`` is either a
live connection or None and the rate limiter falls back to memory.
"""

import logging

from redis.asyncio import Redis, from_url
from redis.exceptions import RedisError

from school_admin.core.config import settings

logger = logging.getLogger(__name__)

redis_client: Redis | None = None


async def init_redis(url: str | None = None) -> Redis:
    """
    Connect to Redis and publish the client for the rate limiter.

    Raises:
        RedisError: If the server does not answer the initial ping
    """
    global redis_client
    client = from_url(url or settings.redis_url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except RedisError:
        await client.aclose()
        raise
    redis_client = client
    return client


async def redis_status() -> dict[str, str]:
    """Connection state for the debug endpoint."""
    if redis_client is None:
        return {"redis": "not initialized"}
    try:
        await redis_client.ping()
    except RedisError as e:
        return {"redis": "error", "message": str(e)}
    return {"redis": "connected"}


async def close_redis() -> None:
    global redis_client
    if redis_client is None:
        return
    client, redis_client = redis_client, None
    await client.aclose()
    logger.info("Redis connection closed")
