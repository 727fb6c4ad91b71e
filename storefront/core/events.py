"""
Application lifecycle event handlers.

These functions are executed during application startup and shutdown.
Which ones run depends on the service role.
"""

from typing import Awaitable, Callable, Dict, List

from loguru import logger
from sqlalchemy import text

from storefront.core.config import settings
from storefront.core.redis import close_redis_client, get_redis_client
from storefront.db import models  # noqa: F401
from storefront.db.session import Base, async_session_factory, engine
from storefront.gateway.proxy import close_http_client, get_http_client

EventHandler = Callable[[], Awaitable[None]]


async def connect_to_db() -> None:
    """
    Initialize database connection.
    """
    try:
        # Test database connection to fail fast during startup if DB is not available
        logger.info("Connecting to PostgreSQL database...")

        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
            await session.commit()

        if settings.AUTO_CREATE_TABLES:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created")

        logger.info("Database connection established and verified")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        # Critical error - fail application startup if database is not available
        raise


async def close_db_connection() -> None:
    """
    Close database connection.
    """
    logger.info("Closing database connections...")
    await engine.dispose()
    logger.info("Database connections closed")


async def connect_to_redis() -> None:
    try:
        logger.info("Connecting to Redis...")
        await get_redis_client().ping()
        logger.info("Redis connection established and verified")
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        raise


async def open_http_client() -> None:
    get_http_client()
    logger.info("Upstream HTTP client ready")


# Startup handlers per service role, executed in order
startup_event_handlers: Dict[str, List[EventHandler]] = {
    "gateway": [open_http_client],
    "category": [connect_to_db],
    "item": [connect_to_db],
    "auth": [connect_to_db, connect_to_redis],
}

# Shutdown handlers per service role, executed in order
shutdown_event_handlers: Dict[str, List[EventHandler]] = {
    "gateway": [close_http_client],
    "category": [close_db_connection],
    "item": [close_db_connection],
    "auth": [close_redis_client, close_db_connection],
}
