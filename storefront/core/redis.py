"""
Redis client configuration.
"""

from typing import Optional

from loguru import logger
from redis.asyncio import Redis

from storefront.core.config import settings

_client: Optional[Redis] = None


def get_redis_client() -> Redis:
    """
    Get the shared Redis client, creating it on first use.

    The connection pool opens connections lazily, so creating the client
    does not touch the network.
    """
    global _client
    if _client is None:
        _client = Redis.from_url(str(settings.REDIS_URI), decode_responses=True)
    return _client


async def close_redis_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
        logger.info("Redis connection closed")
