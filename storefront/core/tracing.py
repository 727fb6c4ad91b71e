"""
OpenTelemetry distributed tracing configuration.
"""

from fastapi import FastAPI
from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio

from storefront.core.config import settings
from storefront.db.session import engine


def configure_tracer(service_name: str) -> TracerProvider:
    """
    Configure the OpenTelemetry tracer.

    This sets up the global tracer provider with appropriate sampling,
    processors, and exporters.

    Args:
        service_name: Role of this process, reported as the service name

    Returns:
        The configured tracer provider
    """
    resource = Resource.create(
        {
            "service.name": f"storefront-{service_name}",
            "service.version": settings.VERSION,
            "deployment.environment": settings.ENVIRONMENT,
        }
    )

    tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBasedTraceIdRatio(0.1),  # Sample 10% of traces
    )

    # Use console exporter for development
    if settings.ENVIRONMENT == "development":
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    # Add OTLP exporter if configured (e.g., Jaeger or other collector)
    if settings.OTLP_ENDPOINT:
        tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.OTLP_ENDPOINT)))

    trace.set_tracer_provider(tracer_provider)

    return tracer_provider


def setup_tracing(app: FastAPI, service_name: str) -> None:
    """
    Set up OpenTelemetry tracing for the FastAPI application.

    The gateway traces its outgoing httpx calls; the other roles trace
    their SQLAlchemy engine.

    Args:
        app: The FastAPI application to instrument
        service_name: Role of this process
    """
    if not settings.ENABLE_TRACING:
        return

    try:
        tracer_provider = configure_tracer(service_name)

        FastAPIInstrumentor.instrument_app(
            app,
            tracer_provider=tracer_provider,
            excluded_urls="health,metrics",  # Exclude health and metrics endpoints
        )

        if service_name == "gateway":
            HTTPXClientInstrumentor().instrument(tracer_provider=tracer_provider)
        else:
            SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=tracer_provider)

        LoggingInstrumentor().instrument(tracer_provider=tracer_provider)

        logger.info("OpenTelemetry tracing configured successfully")
    except Exception as e:
        logger.error(f"Failed to setup OpenTelemetry tracing: {e}")
