from typing import Any

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_auth_service, get_current_user_claims
from storefront.api.responses import (
    HTTP_201_CREATED,
    ApiResponse,
    Tags,
    auth_error_responses,
    success_response,
)
from storefront.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    TokenPayload,
    UserProfile,
)
from storefront.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=[Tags.AUTH])


@router.post(
    "/register",
    response_model=ApiResponse[TokenPair],
    status_code=HTTP_201_CREATED,
    summary="Register a new user.",
    responses=auth_error_responses,
)
async def register(user_in: RegisterRequest, service: AuthService = Depends(get_auth_service)) -> Any:
    """Register a new user and return a token pair."""
    tokens = await service.register(user_in)
    return success_response("User registered successfully", tokens)


@router.post(
    "/login",
    response_model=ApiResponse[TokenPair],
    summary="Log in with email and password.",
    responses=auth_error_responses,
)
async def login(credentials: LoginRequest, service: AuthService = Depends(get_auth_service)) -> Any:
    tokens = await service.login(credentials)
    return success_response("Login successful", tokens)


@router.post(
    "/refresh",
    response_model=ApiResponse[TokenPair],
    summary="Rotate the refresh token.",
    description="Exchanges the current refresh token for a new pair. The presented token stops working.",
    responses=auth_error_responses,
)
async def refresh(body: RefreshRequest, service: AuthService = Depends(get_auth_service)) -> Any:
    tokens = await service.refresh(body.refresh_token)
    return success_response("Token refreshed successfully", tokens)


@router.get(
    "/profile",
    response_model=ApiResponse[UserProfile],
    summary="Get the current user's profile.",
    responses=auth_error_responses,
)
async def get_profile(
    claims: TokenPayload = Depends(get_current_user_claims),
    service: AuthService = Depends(get_auth_service),
) -> Any:
    profile = await service.get_profile(claims.sub)
    return success_response("Profile retrieved successfully", profile)


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    summary="Log out.",
    description="Invalidates the user's refresh token. Access tokens stay valid until they expire.",
    responses=auth_error_responses,
)
async def logout(
    claims: TokenPayload = Depends(get_current_user_claims),
    service: AuthService = Depends(get_auth_service),
) -> Any:
    await service.logout(claims.sub)
    return success_response("Logged out successfully")
