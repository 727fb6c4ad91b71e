import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from storefront.api.errors import flatten_validation_errors, register_exception_handlers
from storefront.core.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    UpstreamUnavailableError,
    ValidationError,
)


@pytest.fixture(scope="module")
def app_with_errors():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/validation")
    async def validation_endpoint(param: int):
        return {"param": param}

    @app.get("/service/{kind}")
    async def service_error(kind: str):
        errors = {
            "validation": ValidationError("Bad slug", details={"slug": "invalid"}),
            "conflict": ConflictError("Category with slug 'books' already exists"),
            "not_found": NotFoundError("Item with ID 1 not found"),
            "unauthorized": UnauthorizedError("Invalid credentials"),
            "upstream": UpstreamUnavailableError("Item service is unavailable"),
            "internal": InternalError(),
        }
        raise errors[kind]

    @app.get("/integrity")
    async def integrity_error():
        raise IntegrityError("mock stmt", "mock params", Exception("duplicate key value"))

    @app.get("/sqlalchemy")
    async def sqlalchemy_error():
        raise SQLAlchemyError("connection string with password=hunter2")

    @app.get("/redis")
    async def redis_error():
        raise RedisConnectionError("redis://:hunter2@cache:6379 refused")

    @app.get("/general")
    async def general_error():
        raise RuntimeError("some unexpected error")

    return app


def client_for(app: FastAPI) -> AsyncClient:
    # Unhandled exceptions are re-raised by Starlette after the handler has answered
    return AsyncClient(transport=ASGITransport(app=app, raise_app_exceptions=False), base_url="http://test")


async def test_validation_exception(app_with_errors):
    async with client_for(app_with_errors) as ac:
        response = await ac.get("/validation", params={"param": "abc"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["details"][0]["field"] == "query.param"
    assert "timestamp" in body["metadata"]


@pytest.mark.parametrize(
    "kind, status_code, code, message",
    [
        ("validation", 400, "VALIDATION_ERROR", "Bad slug"),
        ("conflict", 409, "CONFLICT", "Category with slug 'books' already exists"),
        ("not_found", 404, "NOT_FOUND", "Item with ID 1 not found"),
        ("unauthorized", 401, "UNAUTHORIZED", "Invalid credentials"),
        ("upstream", 503, "SERVICE_UNAVAILABLE", "Item service is unavailable"),
        ("internal", 500, "INTERNAL_ERROR", "An unexpected error occurred"),
    ],
)
async def test_service_errors(app_with_errors, kind, status_code, code, message):
    async with client_for(app_with_errors) as ac:
        response = await ac.get(f"/service/{kind}")

    assert response.status_code == status_code
    body = response.json()
    assert body["error"]["code"] == code
    assert body["message"] == message
    assert "data" not in body


async def test_service_error_details_and_headers(app_with_errors):
    async with client_for(app_with_errors) as ac:
        validation = await ac.get("/service/validation")
        unauthorized = await ac.get("/service/unauthorized")

    assert validation.json()["error"]["details"] == {"slug": "invalid"}
    assert unauthorized.headers["WWW-Authenticate"] == "Bearer"


async def test_integrity_exception(app_with_errors):
    async with client_for(app_with_errors) as ac:
        response = await ac.get("/integrity")

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"
    assert "duplicate key" not in response.text


@pytest.mark.parametrize("path", ["/sqlalchemy", "/redis", "/general"])
async def test_internal_failures_do_not_leak(app_with_errors, path):
    async with client_for(app_with_errors) as ac:
        response = await ac.get(path)

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INTERNAL_ERROR"
    assert response.json()["message"] == "An unexpected error occurred"
    assert "hunter2" not in response.text
    assert "unexpected error occurred" in response.text


async def test_method_not_allowed(app_with_errors):
    async with client_for(app_with_errors) as ac:
        response = await ac.post("/integrity")

    assert response.status_code == 405
    assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"


def test_flatten_validation_errors():
    errors = [
        {"loc": ("body", "price"), "msg": "Input should be greater than 0"},
        {"loc": ("body", "items", 0, "name"), "msg": "Field required"},
        {"loc": ("path", "id")},
    ]

    assert flatten_validation_errors(errors) == [
        {"field": "price", "message": "Input should be greater than 0"},
        {"field": "items.0.name", "message": "Field required"},
        {"field": "path.id", "message": "Validation error"},
    ]
