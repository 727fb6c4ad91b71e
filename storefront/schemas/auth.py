"""
Pydantic schemas for authentication.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from storefront.db.models.user import UserRole
from storefront.schemas.base import CamelModel, RequestModel


class RegisterRequest(RequestModel):
    """Schema for user registration."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, max_length=72, description="User password")
    name: Optional[str] = Field(None, max_length=255, description="User full name")
    role: Optional[UserRole] = Field(None, description="User role")


class LoginRequest(RequestModel):
    """Schema for user login."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class RefreshRequest(RequestModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token")


class TokenPair(CamelModel):
    """Access/refresh token pair returned by register, login and refresh."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    token_type: str = Field("Bearer", description="Token type")


class TokenPayload(BaseModel):
    """Claims carried by access and refresh tokens."""

    sub: str
    email: str
    role: str
    type: str
    jti: Optional[str] = None
    iat: Optional[int] = None
    exp: Optional[int] = None


class UserProfile(CamelModel):
    """Public user fields; the password hash is never part of it."""

    id: str
    email: str
    name: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime
