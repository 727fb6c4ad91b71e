import os

# Settings are read at import time, so the environment has to be ready first.
os.environ["ENABLE_TRACING"] = "false"
os.environ["JSON_LOGS"] = "false"
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URI", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from typing import AsyncGenerator, Callable, Dict  # noqa: E402

import httpx  # noqa: E402
import pytest_asyncio  # noqa: E402
from fakeredis import aioredis as fake_aioredis  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from storefront.api.dependencies import get_db_session, get_redis  # noqa: E402
from storefront.db import models  # noqa: E402,F401
from storefront.db.session import Base  # noqa: E402
from storefront.gateway.proxy import ServiceProxy, get_service_proxy  # noqa: E402
from storefront.main import create_application  # noqa: E402
from storefront.services.auth import AuthService  # noqa: E402
from storefront.services.refresh_tokens import RefreshTokenRegistry  # noqa: E402
from storefront.services.tokens import TokenIssuer  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def fake_redis() -> AsyncGenerator[fake_aioredis.FakeRedis, None]:
    redis = fake_aioredis.FakeRedis(decode_responses=True)
    yield redis
    await redis.flushall()
    await redis.aclose()


@pytest_asyncio.fixture(scope="function")
async def registry(fake_redis: fake_aioredis.FakeRedis) -> RefreshTokenRegistry:
    return RefreshTokenRegistry(fake_redis)


@pytest_asyncio.fixture(scope="function")
async def auth_service(db_session: AsyncSession, registry: RefreshTokenRegistry) -> AuthService:
    return AuthService(db_session, registry, TokenIssuer())


def build_app(service_name: str, db_session: AsyncSession, redis: fake_aioredis.FakeRedis) -> FastAPI:
    app = create_application(service_name)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db
    app.dependency_overrides[get_redis] = lambda: redis
    return app


@pytest_asyncio.fixture(scope="function")
async def app_client(
    db_session: AsyncSession, fake_redis: fake_aioredis.FakeRedis
) -> AsyncGenerator[Callable[[str], AsyncClient], None]:
    """
    Factory of HTTP clients, one per service role, sharing the test stores.
    """
    clients = []

    def make_client(service_name: str) -> AsyncClient:
        app = build_app(service_name, db_session, fake_redis)
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield make_client

    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture(scope="function")
async def category_client(app_client: Callable[[str], AsyncClient]) -> AsyncClient:
    return app_client("category")


@pytest_asyncio.fixture(scope="function")
async def item_client(app_client: Callable[[str], AsyncClient]) -> AsyncClient:
    return app_client("item")


@pytest_asyncio.fixture(scope="function")
async def auth_client(app_client: Callable[[str], AsyncClient]) -> AsyncClient:
    return app_client("auth")


@pytest_asyncio.fixture(scope="function")
async def gateway_client(
    db_session: AsyncSession, fake_redis: fake_aioredis.FakeRedis
) -> AsyncGenerator[AsyncClient, None]:
    """
    Gateway whose upstream calls are served in-process by the real service apps.
    """
    upstream_apps: Dict[str, FastAPI] = {
        service: build_app(service, db_session, fake_redis) for service in ("category", "item", "auth")
    }

    async def dispatch(request: httpx.Request) -> httpx.Response:
        app = upstream_apps[request.url.host]
        async with AsyncClient(transport=ASGITransport(app=app), base_url=f"http://{request.url.host}") as client:
            response = await client.request(
                request.method, request.url.raw_path.decode(), content=request.content, headers=request.headers
            )
            return httpx.Response(response.status_code, headers=response.headers, content=response.content)

    upstream_client = httpx.AsyncClient(transport=httpx.MockTransport(dispatch))
    proxy = ServiceProxy(
        upstream_client,
        upstreams={"category": "http://category", "item": "http://item", "auth": "http://auth"},
    )

    gateway = create_application("gateway")
    gateway.dependency_overrides[get_service_proxy] = lambda: proxy

    async with AsyncClient(transport=ASGITransport(app=gateway), base_url="http://test") as client:
        yield client
    await upstream_client.aclose()
