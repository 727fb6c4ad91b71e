"""
FastAPI API dependencies.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import UnauthorizedError
from storefront.core.redis import get_redis_client
from storefront.db.session import async_session_factory
from storefront.schemas.auth import TokenPayload
from storefront.services.auth import AuthService
from storefront.services.categories import CategoryService
from storefront.services.items import ItemService
from storefront.services.refresh_tokens import RefreshTokenRegistry
from storefront.services.tokens import ACCESS_TOKEN, TokenIssuer

CREDENTIALS_ERROR = "Could not validate credentials"


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting an async database session.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_redis() -> Redis:
    return get_redis_client()


def get_token_issuer() -> TokenIssuer:
    return TokenIssuer()


def get_refresh_token_registry(redis: Redis = Depends(get_redis)) -> RefreshTokenRegistry:
    return RefreshTokenRegistry(redis)


def get_category_service(db: AsyncSession = Depends(get_db_session)) -> CategoryService:
    return CategoryService(db)


def get_item_service(db: AsyncSession = Depends(get_db_session)) -> ItemService:
    return ItemService(db)


def get_auth_service(
    db: AsyncSession = Depends(get_db_session),
    registry: RefreshTokenRegistry = Depends(get_refresh_token_registry),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(db, registry, issuer)


bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenPayload:
    """
    Claims of the bearer access token.

    A missing header, a bad signature, an expired token and a refresh token
    presented as an access token all fail with the same message.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError(CREDENTIALS_ERROR)
    return issuer.decode(credentials.credentials, ACCESS_TOKEN, CREDENTIALS_ERROR)
