"""
Health check endpoints.

Liveness only says the process is up. Readiness checks what the role depends
on: the database for the store-backed services, Redis for auth, and the
backend services for the gateway.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel
from redis.asyncio import Redis
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies import get_db_session, get_redis
from storefront.api.responses import (
    HTTP_503_SERVICE_UNAVAILABLE,
    ApiResponse,
    ErrorResponseModel,
    Tags,
    error_response,
    success_response,
)
from storefront.core.config import settings
from storefront.gateway.proxy import get_http_client, upstream_urls

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"


class HealthStatus(BaseModel):
    """Health status model."""

    status: str
    service: str
    version: str
    environment: str

    model_config = {
        "json_schema_extra": {
            "example": {"status": "ok", "service": "category", "version": "1.0.0", "environment": "development"}
        }
    }


class ComponentStatus(BaseModel):
    """Component health status model."""

    name: str
    status: str
    details: Optional[Dict[str, Any]] = None

    model_config = {
        "json_schema_extra": {"example": {"name": "database", "status": "healthy", "details": {"type": "postgresql"}}}
    }


class DetailedHealthStatus(HealthStatus):
    """Detailed health status model with component status information."""

    components: List[ComponentStatus]


async def check_database(session: AsyncSession) -> ComponentStatus:
    try:
        await session.execute(text("SELECT 1"))
        return ComponentStatus(name="database", status=HEALTHY, details={"type": "postgresql"})
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return ComponentStatus(name="database", status=UNHEALTHY, details={"error": type(e).__name__})


async def check_redis(redis: Redis) -> ComponentStatus:
    try:
        await redis.ping()
        return ComponentStatus(name="redis", status=HEALTHY, details={"type": "redis"})
    except Exception as e:
        logger.error(f"Redis health check failed: {str(e)}")
        return ComponentStatus(name="redis", status=UNHEALTHY, details={"error": type(e).__name__})


async def check_upstream(client: httpx.AsyncClient, service: str, url: str) -> ComponentStatus:
    name = f"{service}-service"
    try:
        response = await client.get(f"{url}/health")
    except httpx.RequestError as e:
        logger.error(f"Upstream {service} health check failed: {e!r}")
        return ComponentStatus(name=name, status=UNHEALTHY, details={"url": url, "error": type(e).__name__})

    status = HEALTHY if response.status_code == 200 else UNHEALTHY
    return ComponentStatus(name=name, status=status, details={"url": url, "statusCode": response.status_code})


async def gateway_components(
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> List[ComponentStatus]:
    return [await check_upstream(http_client, service, url) for service, url in upstream_urls().items()]


async def catalog_components(db_session: AsyncSession = Depends(get_db_session)) -> List[ComponentStatus]:
    return [await check_database(db_session)]


async def auth_components(
    db_session: AsyncSession = Depends(get_db_session),
    redis: Redis = Depends(get_redis),
) -> List[ComponentStatus]:
    return [await check_database(db_session), await check_redis(redis)]


# Each role only opens the clients its own checks need
READINESS_CHECKS: Dict[str, Callable[..., Awaitable[List[ComponentStatus]]]] = {
    "gateway": gateway_components,
    "category": catalog_components,
    "item": catalog_components,
    "auth": auth_components,
}


def create_health_router(service_name: str) -> APIRouter:
    """
    Build the health router for one service role.
    """
    router = APIRouter(tags=[Tags.HEALTH])

    @router.get(
        "",
        response_model=ApiResponse[HealthStatus],
        summary="Basic health check endpoint",
        description="Returns a simple status indicating the service is running, along with version and environment information.",  # noqa: E501
        responses={200: {"description": "Service is healthy"}},
    )
    async def health_check() -> Any:
        """
        Basic health check endpoint.
        """
        return success_response(
            "Service is healthy",
            HealthStatus(
                status="ok",
                service=service_name,
                version=settings.VERSION,
                environment=settings.ENVIRONMENT,
            ),
        )

    @router.get(
        "/ready",
        response_model=ApiResponse[DetailedHealthStatus],
        summary="Readiness check endpoint",
        description="Checks the components this service depends on and returns detailed status information.",
        responses={
            200: {"description": "Service is ready"},
            HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponseModel, "description": "Service is not ready"},
        },
    )
    async def readiness_check(
        components: List[ComponentStatus] = Depends(READINESS_CHECKS[service_name]),
    ) -> Any:
        """
        Detailed health check for service readiness.
        """
        if any(component.status != HEALTHY for component in components):
            return JSONResponse(
                status_code=HTTP_503_SERVICE_UNAVAILABLE,
                content=error_response(
                    "Service is not ready",
                    "SERVICE_UNAVAILABLE",
                    [component.model_dump() for component in components],
                ),
            )

        return success_response(
            "Service is ready",
            DetailedHealthStatus(
                status="ok",
                service=service_name,
                version=settings.VERSION,
                environment=settings.ENVIRONMENT,
                components=components,
            ),
        )

    return router
