"""
HTTP proxy from the gateway to the backend services.
"""

from typing import Any, Dict, Mapping, Optional

import httpx
from fastapi import Request, Response
from loguru import logger

from storefront.api.middleware import REQUEST_ID_HEADER, get_request_id
from storefront.core.config import settings
from storefront.core.exceptions import UpstreamUnavailableError
from storefront.core.metrics import record_upstream_response

CATEGORY_SERVICE = "category"
ITEM_SERVICE = "item"
AUTH_SERVICE = "auth"

# Request headers passed through to the backend services
FORWARDED_HEADERS = ("authorization", "accept-language")
# Upstream response headers relayed back besides the content type
RELAYED_HEADERS = ("www-authenticate",)

_client: Optional[httpx.AsyncClient] = None


def upstream_urls() -> Dict[str, str]:
    return {
        CATEGORY_SERVICE: settings.CATEGORY_SERVICE_URL.rstrip("/"),
        ITEM_SERVICE: settings.ITEM_SERVICE_URL.rstrip("/"),
        AUTH_SERVICE: settings.AUTH_SERVICE_URL.rstrip("/"),
    }


def get_http_client() -> httpx.AsyncClient:
    """Get the shared upstream client, creating it on first use."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=settings.UPSTREAM_TIMEOUT_SECONDS)
    return _client


async def close_http_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
        logger.info("Upstream HTTP client closed")


class ServiceProxy:
    """
    Forwards requests to a backend service and relays its answer.

    Any upstream response, error statuses included, goes back to the caller
    unchanged. Only a request that got no response at all turns into
    ``UpstreamUnavailableError``.
    """

    def __init__(self, client: httpx.AsyncClient, upstreams: Optional[Mapping[str, str]] = None):
        self.client = client
        self.upstreams = dict(upstreams) if upstreams is not None else upstream_urls()

    @staticmethod
    def display_name(service: str) -> str:
        return service.capitalize()

    def build_headers(self, request: Request) -> Dict[str, str]:
        headers = {name: request.headers[name] for name in FORWARDED_HEADERS if name in request.headers}
        request_id = get_request_id()
        if request_id:
            headers[REQUEST_ID_HEADER] = request_id
        return headers

    async def forward(
        self,
        service: str,
        method: str,
        path: str,
        request: Request,
        json: Optional[Any] = None,
    ) -> Response:
        """
        Send ``method path`` to ``service`` and return its response.

        Args:
            service: Backend service key (``category``, ``item`` or ``auth``)
            method: HTTP method
            path: Path on the backend service, starting with ``/``
            request: The inbound request, for headers and query parameters
            json: Already validated request body, if any

        Raises:
            UpstreamUnavailableError: If the service did not answer
        """
        url = f"{self.upstreams[service]}{path}"

        try:
            upstream = await self.client.request(
                method,
                url,
                json=json,
                params=list(request.query_params.multi_items()),
                headers=self.build_headers(request),
            )
        except httpx.RequestError as e:
            logger.error(f"{self.display_name(service)} service request {method} {url} failed: {e!r}")
            record_upstream_response(service, 503)
            raise UpstreamUnavailableError(f"{self.display_name(service)} service is unavailable")

        record_upstream_response(service, upstream.status_code)
        if upstream.status_code >= 500:
            logger.warning(f"{self.display_name(service)} service answered {upstream.status_code} for {method} {path}")

        return Response(
            content=upstream.content,
            status_code=upstream.status_code,
            headers={name: upstream.headers[name] for name in RELAYED_HEADERS if name in upstream.headers},
            media_type=upstream.headers.get("content-type"),
        )


def get_service_proxy() -> ServiceProxy:
    return ServiceProxy(get_http_client())
