"""
Tests for the auth service HTTP surface.
"""

from typing import Any, Dict

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

CREDENTIALS = {"email": "jane@example.com", "password": "s3cret-pass"}


async def register(client: AsyncClient, **extra: Any) -> Dict[str, Any]:
    response = await client.post("/auth/register", json={**CREDENTIALS, **extra})
    assert response.status_code == 201
    return response.json()["data"]  # type: ignore[no-any-return]


async def test_register_returns_token_pair(auth_client: AsyncClient) -> None:
    response = await auth_client.post("/auth/register", json={**CREDENTIALS, "name": "Jane"})

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    assert set(body["data"]) == {"accessToken", "refreshToken", "expiresIn", "tokenType"}
    assert body["data"]["tokenType"] == "Bearer"
    assert body["data"]["expiresIn"] == 3600


async def test_register_duplicate_email(auth_client: AsyncClient) -> None:
    await register(auth_client)

    response = await auth_client.post("/auth/register", json=CREDENTIALS)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "not-an-email", "password": "s3cret-pass"},
        {"email": "jane@example.com", "password": "short"},
        {"email": "jane@example.com"},
        {"email": "jane@example.com", "password": "s3cret-pass", "role": "superuser"},
    ],
)
async def test_register_validation(auth_client: AsyncClient, payload) -> None:
    response = await auth_client.post("/auth/register", json=payload)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_login_and_profile(auth_client: AsyncClient) -> None:
    await register(auth_client, name="Jane")

    login = await auth_client.post("/auth/login", json=CREDENTIALS)
    token = login.json()["data"]["accessToken"]
    profile = await auth_client.get("/auth/profile", headers={"Authorization": f"Bearer {token}"})

    assert login.status_code == 200
    assert login.json()["message"] == "Login successful"
    assert profile.status_code == 200
    data = profile.json()["data"]
    assert data["email"] == CREDENTIALS["email"]
    assert data["name"] == "Jane"
    assert data["role"] == "user"
    assert data["isActive"] is True
    assert "password" not in data
    assert "hashedPassword" not in data


async def test_login_failures_look_the_same(auth_client: AsyncClient) -> None:
    await register(auth_client)

    wrong_password = await auth_client.post("/auth/login", json={**CREDENTIALS, "password": "wrong-pass"})
    unknown_email = await auth_client.post("/auth/login", json={**CREDENTIALS, "email": "nobody@example.com"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json()["message"] == unknown_email.json()["message"] == "Invalid credentials"
    assert wrong_password.headers["WWW-Authenticate"] == "Bearer"


async def test_profile_requires_valid_access_token(auth_client: AsyncClient) -> None:
    tokens = await register(auth_client)

    missing = await auth_client.get("/auth/profile")
    garbage = await auth_client.get("/auth/profile", headers={"Authorization": "Bearer garbage"})
    refresh_as_access = await auth_client.get(
        "/auth/profile", headers={"Authorization": f"Bearer {tokens['refreshToken']}"}
    )

    for response in (missing, garbage, refresh_as_access):
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        assert response.json()["message"] == "Could not validate credentials"


async def test_refresh_rotation(auth_client: AsyncClient) -> None:
    tokens = await register(auth_client)

    first = await auth_client.post("/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    replay = await auth_client.post("/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    second = await auth_client.post("/auth/refresh", json={"refreshToken": first.json()["data"]["refreshToken"]})

    assert first.status_code == 200
    assert first.json()["message"] == "Token refreshed successfully"
    assert replay.status_code == 401
    assert replay.json()["message"] == "Invalid refresh token"
    assert second.status_code == 200


async def test_logout_revokes_refresh_token(auth_client: AsyncClient) -> None:
    tokens = await register(auth_client)
    headers = {"Authorization": f"Bearer {tokens['accessToken']}"}

    logout = await auth_client.post("/auth/logout", headers=headers)
    logout_again = await auth_client.post("/auth/logout", headers=headers)
    refresh = await auth_client.post("/auth/refresh", json={"refreshToken": tokens["refreshToken"]})

    assert logout.status_code == 200
    assert logout.json()["message"] == "Logged out successfully"
    assert logout_again.status_code == 200
    assert refresh.status_code == 401


async def test_logout_requires_token(auth_client: AsyncClient) -> None:
    response = await auth_client.post("/auth/logout")

    assert response.status_code == 401
