"""Access/refresh token issuing."""

from datetime import timedelta
from typing import Any, Dict
from uuid import uuid4

from jose import JWTError
from pydantic import ValidationError as PydanticValidationError

from storefront.core.config import settings
from storefront.core.exceptions import UnauthorizedError
from storefront.core.security import decode_token, encode_token
from storefront.db.models.user import User
from storefront.schemas.auth import TokenPair, TokenPayload

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


class TokenIssuer:
    """
    Signs token pairs from a user's identity.

    Both tokens carry ``sub``, ``email`` and ``role``; ``type`` tells them
    apart and ``jti`` makes every issued token unique. Persisting the refresh
    token is the caller's job.
    """

    def __init__(
        self,
        access_expires_in: int = settings.ACCESS_TOKEN_EXPIRE_SECONDS,
        refresh_expires_in: int = settings.REFRESH_TOKEN_EXPIRE_SECONDS,
    ):
        self.access_expires_in = access_expires_in
        self.refresh_expires_in = refresh_expires_in

    def generate_tokens(self, user: User) -> TokenPair:
        claims: Dict[str, Any] = {"sub": str(user.id), "email": user.email, "role": user.role}

        access_token = encode_token(
            {**claims, "type": ACCESS_TOKEN, "jti": str(uuid4())},
            timedelta(seconds=self.access_expires_in),
        )
        refresh_token = encode_token(
            {**claims, "type": REFRESH_TOKEN, "jti": str(uuid4())},
            timedelta(seconds=self.refresh_expires_in),
        )

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.access_expires_in,
            token_type="Bearer",
        )

    def decode(self, token: str, expected_type: str, message: str = "Invalid token") -> TokenPayload:
        """Verify ``token`` and return its claims, or raise ``UnauthorizedError(message)``."""
        try:
            payload = TokenPayload(**decode_token(token))
        except (JWTError, PydanticValidationError):
            raise UnauthorizedError(message)

        if payload.type != expected_type:
            raise UnauthorizedError(message)

        return payload
