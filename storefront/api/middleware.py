"""
API middleware components.

This module contains the request context middleware, which assigns a request
ID for correlation in logs, upstream calls and response metadata.
"""

import contextvars
import uuid
from typing import Optional

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

REQUEST_ID_HEADER = "X-Request-ID"

# Context variables for request-scoped data
request_id_var = contextvars.ContextVar[Optional[str]]("request_id", default=None)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that sets a request ID for the duration of a request.

    An inbound ``X-Request-ID`` (set by the gateway) is reused so one ID
    follows a request across services.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """
        Process a request with a request ID bound to the logging context.

        Args:
            request: The FastAPI request
            call_next: The next request handler

        Returns:
            The response
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_var.set(request_id)

        try:
            with logger.contextualize(request_id=request_id):
                logger.info(
                    f"Request {request.method} {request.url.path}",
                    method=request.method,
                    path=request.url.path,
                    client_host=request.client.host if request.client else None,
                )
                response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def get_request_id() -> str:
    """
    Get the request ID for the current request.

    Returns:
        The current request ID or an empty string if not in a request context
    """
    request_id = request_id_var.get()
    return request_id if request_id is not None else ""
