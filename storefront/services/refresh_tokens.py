"""Redis-backed refresh token registry."""

from typing import Optional

from loguru import logger
from redis.asyncio import Redis

from storefront.core.config import settings
from storefront.core.metrics import time_redis_operation

KEY_PREFIX = "refresh_token"


class RefreshTokenRegistry:
    """
    Keeps the single live refresh token of each user.

    Storing a token overwrites the previous one, so concurrent logins are
    last-write-wins.
    """

    def __init__(self, redis: Redis, ttl_seconds: int = settings.REFRESH_TOKEN_EXPIRE_SECONDS):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def key(user_id: str) -> str:
        return f"{KEY_PREFIX}:{user_id}"

    @time_redis_operation("set")
    async def store(self, user_id: str, token: str) -> None:
        await self.redis.set(self.key(user_id), token, ex=self.ttl_seconds)
        logger.debug(f"Stored refresh token for user {user_id}")

    @time_redis_operation("get")
    async def validate(self, user_id: str, token: str) -> bool:
        stored: Optional[str] = await self.redis.get(self.key(user_id))
        if isinstance(stored, bytes):
            stored = stored.decode()
        return stored is not None and stored == token

    @time_redis_operation("delete")
    async def invalidate(self, user_id: str) -> None:
        await self.redis.delete(self.key(user_id))
        logger.debug(f"Invalidated refresh token for user {user_id}")
