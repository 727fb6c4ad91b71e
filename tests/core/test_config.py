import pytest
from pydantic import ValidationError

from storefront.core.config import SERVICE_NAMES, Settings


def make_settings(**overrides) -> Settings:
    # Ignore the local .env so only explicit values are used
    return Settings(_env_file=None, **overrides)


def test_database_uri_assembled_from_parts(monkeypatch):
    monkeypatch.delenv("DATABASE_URI", raising=False)

    config = make_settings(
        POSTGRES_SERVER="db",
        POSTGRES_USER="shop",
        POSTGRES_PASSWORD="secret",
        POSTGRES_DB="catalog",
        POSTGRES_PORT="5433",
    )

    assert config.DATABASE_URI == "postgresql+asyncpg://shop:secret@db:5433/catalog"


def test_explicit_database_uri_wins():
    config = make_settings(DATABASE_URI="sqlite+aiosqlite://")

    assert config.DATABASE_URI == "sqlite+aiosqlite://"


def test_redis_uri_assembled_from_parts(monkeypatch):
    monkeypatch.delenv("REDIS_URI", raising=False)

    config = make_settings(REDIS_HOST="cache", REDIS_PORT=6380, REDIS_DB=2)

    assert config.REDIS_URI == "redis://cache:6380/2"


@pytest.mark.parametrize("name", SERVICE_NAMES)
def test_service_name_accepted(name):
    assert make_settings(SERVICE_NAME=name.upper()).SERVICE_NAME == name


def test_unknown_service_name_rejected():
    with pytest.raises(ValidationError):
        make_settings(SERVICE_NAME="payments")


def test_token_lifetimes():
    config = make_settings(REFRESH_TOKEN_EXPIRE_DAYS=7, ACCESS_TOKEN_EXPIRE_SECONDS=3600)

    assert config.ACCESS_TOKEN_EXPIRE_SECONDS == 3600
    assert config.REFRESH_TOKEN_EXPIRE_SECONDS == 604800
