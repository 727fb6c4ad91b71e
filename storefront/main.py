"""
FastAPI application entry point.

One package serves every role; ``SERVICE_NAME`` picks the one this process
runs (``gateway``, ``category``, ``item`` or ``auth``).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from storefront.api.errors import register_exception_handlers
from storefront.api.middleware import RequestContextMiddleware
from storefront.api.responses import Tags
from storefront.api.routes.v1.auth import router as auth_router
from storefront.api.routes.v1.categories import router as categories_router
from storefront.api.routes.v1.endpoints.health import create_health_router
from storefront.api.routes.v1.items import router as items_router
from storefront.core.config import SERVICE_NAMES, settings
from storefront.core.events import shutdown_event_handlers, startup_event_handlers
from storefront.core.logging import configure_logging
from storefront.core.metrics import setup_metrics
from storefront.core.tracing import setup_tracing
from storefront.gateway.routes import router as gateway_router

SERVICE_ROUTERS = {
    "category": categories_router,
    "item": items_router,
    "auth": auth_router,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan event handler for startup and shutdown events.
    """
    service_name = app.state.service_name

    # Configure Sentry
    if settings.SENTRY_DSN:
        sentry_logging = LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            integrations=[
                FastApiIntegration(),
                sentry_logging,
            ],
            environment=settings.ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            release=f"{settings.PROJECT_NAME}@{settings.VERSION}",
            server_name=service_name,
        )
        logger.info("Sentry initialized")

    for handler in startup_event_handlers[service_name]:
        await handler()
    logger.info(f"{service_name} service started")

    yield

    for handler in shutdown_event_handlers[service_name]:
        await handler()
    logger.info(f"{service_name} service stopped")


def create_application(service_name: Optional[str] = None) -> FastAPI:
    """
    Create and configure the FastAPI application for a service role.
    """
    service_name = service_name or settings.SERVICE_NAME
    if service_name not in SERVICE_NAMES:
        raise ValueError(f"Unknown service: {service_name}")

    configure_logging()

    docs_prefix = settings.API_PREFIX if service_name == "gateway" else ""
    show_docs = settings.ENVIRONMENT != "production"

    application = FastAPI(
        title=f"{settings.PROJECT_NAME} ({service_name})",
        description=settings.PROJECT_DESCRIPTION,
        version=settings.VERSION,
        docs_url=f"{docs_prefix}/docs" if show_docs else None,
        redoc_url=f"{docs_prefix}/redoc" if show_docs else None,
        openapi_url=f"{docs_prefix}/openapi.json" if show_docs else None,
        lifespan=lifespan,
        swagger_ui_parameters={
            "deepLinking": True,
            "displayRequestDuration": True,
            "filter": True,
            "tryItOutEnabled": True,
        },
        openapi_tags=[
            {"name": Tags.HEALTH, "description": "Health check and readiness endpoints"},
            {"name": Tags.AUTH, "description": "Registration, login and token refresh"},
            {"name": Tags.CATEGORIES, "description": "Category management endpoints"},
            {"name": Tags.ITEMS, "description": "Item management endpoints"},
        ],
    )
    application.state.service_name = service_name

    # Register exception handlers
    register_exception_handlers(application)

    # Add CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.CORS_ORIGINS_STR == "*" else settings.CORS_ORIGINS_STR.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID for logs, envelopes and upstream calls
    application.add_middleware(RequestContextMiddleware)

    # Setup Prometheus metrics middleware if enabled
    if settings.ENABLE_METRICS:
        setup_metrics(application)
        logger.info("Prometheus metrics enabled")

    # Setup OpenTelemetry tracing if enabled
    if settings.ENABLE_TRACING:
        setup_tracing(application, service_name)
        logger.info("OpenTelemetry tracing enabled")

    # Include routers
    application.include_router(create_health_router(service_name), prefix="/health")
    if service_name == "gateway":
        application.include_router(gateway_router, prefix=settings.API_PREFIX)
    else:
        application.include_router(SERVICE_ROUTERS[service_name])

    return application


app = create_application(settings.SERVICE_NAME)
