"""Business logic for registration, login and the refresh token lifecycle."""

from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from storefront.core.metrics import record_business_event
from storefront.core.security import get_password_hash, verify_password
from storefront.db.models.user import User, UserRole
from storefront.schemas.auth import LoginRequest, RegisterRequest, TokenPair, UserProfile
from storefront.services.refresh_tokens import RefreshTokenRegistry
from storefront.services.tokens import REFRESH_TOKEN, TokenIssuer

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"

_dummy_hash: Optional[str] = None


def dummy_password_hash() -> str:
    """Hash verified for unknown emails so both login failures cost the same."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = get_password_hash("not-a-real-password-for-timing-only")
    return _dummy_hash


class AuthService:
    """Service for user credentials and token pairs."""

    def __init__(self, db: AsyncSession, registry: RefreshTokenRegistry, issuer: TokenIssuer):
        self.db = db
        self.registry = registry
        self.issuer = issuer

    async def register(self, data: RegisterRequest) -> TokenPair:
        """Create a user and sign them in."""
        if await self._get_user_by_email(data.email) is not None:
            raise ConflictError("User with this email already exists")

        user = User(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            name=data.name,
            role=(data.role or UserRole.USER).value,
            is_active=True,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("User with this email already exists")
        await self.db.refresh(user)

        logger.info(f"Registered user {user.id}")
        record_business_event("user_registered")
        return await self._issue_tokens(user)

    async def login(self, data: LoginRequest) -> TokenPair:
        user = await self._get_user_by_email(data.email, active_only=True)

        password_ok = verify_password(data.password, str(user.hashed_password) if user else dummy_password_hash())
        if user is None or not password_ok:
            logger.info("Rejected login attempt")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        logger.info(f"User {user.id} logged in")
        record_business_event("user_logged_in")
        return await self._issue_tokens(user)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Rotate a refresh token.

        Every failure (bad signature, expiry, wrong token type, a token the
        registry no longer holds, a missing or inactive user) surfaces as the
        same ``UnauthorizedError``.
        """
        payload = self.issuer.decode(refresh_token, REFRESH_TOKEN, INVALID_REFRESH_TOKEN)

        if not await self.registry.validate(payload.sub, refresh_token):
            logger.info(f"Refresh token for user {payload.sub} is not the live one")
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        user = await self._get_active_user(payload.sub)
        if user is None:
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        await self.registry.invalidate(str(user.id))
        tokens = await self._issue_tokens(user)

        record_business_event("token_refreshed")
        return tokens

    async def get_profile(self, user_id: str) -> UserProfile:
        user = await self._get_active_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return UserProfile.model_validate(user)

    async def logout(self, user_id: str) -> None:
        """Drop the user's refresh token; logging out twice is fine."""
        await self.registry.invalidate(user_id)
        logger.info(f"User {user_id} logged out")

    async def _issue_tokens(self, user: User) -> TokenPair:
        tokens = self.issuer.generate_tokens(user)
        await self.registry.store(str(user.id), tokens.refresh_token)
        return tokens

    async def _get_user_by_email(self, email: str, active_only: bool = False) -> Optional[User]:
        query = select(User).where(User.email == email)
        if active_only:
            query = query.where(User.is_active.is_(True))
        result = await self.db.execute(query)
        return result.scalars().first()

    async def _get_active_user(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id, User.is_active.is_(True)))
        return result.scalars().first()
