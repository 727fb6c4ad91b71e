"""
Gateway route table.

Every public route is listed here with the backend service that owns it and
the schema its body must satisfy. Bodies are validated at the gateway with
the same schemas the services use, then forwarded as JSON.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Type
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from storefront.api.responses import HTTP_200_OK, HTTP_201_CREATED, Tags, gateway_error_responses
from storefront.gateway.proxy import AUTH_SERVICE, CATEGORY_SERVICE, ITEM_SERVICE, ServiceProxy, get_service_proxy
from storefront.schemas.auth import LoginRequest, RefreshRequest, RegisterRequest
from storefront.schemas.catalog import CategoryCreate, CategoryUpdate, ItemCreate, ItemUpdate


@dataclass(frozen=True)
class GatewayRoute:
    method: str
    path: str
    service: str
    summary: str
    body: Optional[Type[BaseModel]] = None
    status_code: int = HTTP_200_OK
    tag: str = Tags.GATEWAY

    def upstream_path(self, request: Request) -> str:
        # Backend services expose the same paths without the gateway prefix.
        # Path values arrive decoded and must be re-encoded as single segments.
        params = {name: quote(str(value), safe="") for name, value in request.path_params.items()}
        return self.path.format(**params)


ROUTES: List[GatewayRoute] = [
    # Auth
    GatewayRoute("POST", "/auth/register", AUTH_SERVICE, "Register a new user", RegisterRequest, HTTP_201_CREATED, Tags.AUTH),  # noqa: E501
    GatewayRoute("POST", "/auth/login", AUTH_SERVICE, "Log in", LoginRequest, tag=Tags.AUTH),
    GatewayRoute("POST", "/auth/refresh", AUTH_SERVICE, "Rotate the refresh token", RefreshRequest, tag=Tags.AUTH),
    GatewayRoute("GET", "/auth/profile", AUTH_SERVICE, "Get the current user's profile", tag=Tags.AUTH),
    GatewayRoute("POST", "/auth/logout", AUTH_SERVICE, "Log out", tag=Tags.AUTH),
    # Categories
    GatewayRoute("POST", "/categories", CATEGORY_SERVICE, "Create a category", CategoryCreate, HTTP_201_CREATED, Tags.CATEGORIES),  # noqa: E501
    GatewayRoute("GET", "/categories", CATEGORY_SERVICE, "List categories", tag=Tags.CATEGORIES),
    GatewayRoute("GET", "/categories/slug/{slug}", CATEGORY_SERVICE, "Get a category by slug", tag=Tags.CATEGORIES),
    GatewayRoute("GET", "/categories/{category_id}", CATEGORY_SERVICE, "Get a category by ID", tag=Tags.CATEGORIES),
    GatewayRoute("PATCH", "/categories/{category_id}", CATEGORY_SERVICE, "Update a category", CategoryUpdate, tag=Tags.CATEGORIES),  # noqa: E501
    GatewayRoute("DELETE", "/categories/{category_id}", CATEGORY_SERVICE, "Delete a category", tag=Tags.CATEGORIES),
    # Items
    GatewayRoute("POST", "/items", ITEM_SERVICE, "Create an item", ItemCreate, HTTP_201_CREATED, Tags.ITEMS),
    GatewayRoute("GET", "/items", ITEM_SERVICE, "List items", tag=Tags.ITEMS),
    GatewayRoute("GET", "/items/slug/{slug}", ITEM_SERVICE, "Get an item by slug", tag=Tags.ITEMS),
    GatewayRoute("GET", "/items/category/{category_id}", ITEM_SERVICE, "List the items of a category", tag=Tags.ITEMS),
    GatewayRoute("GET", "/items/{item_id}", ITEM_SERVICE, "Get an item by ID", tag=Tags.ITEMS),
    GatewayRoute("PATCH", "/items/{item_id}", ITEM_SERVICE, "Update an item", ItemUpdate, tag=Tags.ITEMS),
    GatewayRoute("DELETE", "/items/{item_id}", ITEM_SERVICE, "Delete an item", tag=Tags.ITEMS),
]


def make_endpoint(route: GatewayRoute) -> Callable[..., Any]:
    """Build the handler that validates the body (if any) and forwards the request."""
    if route.body is None:

        async def forward(request: Request, proxy: ServiceProxy = Depends(get_service_proxy)) -> Response:
            return await proxy.forward(route.service, route.method, route.upstream_path(request), request)

        return forward

    body_model = route.body

    async def forward_with_body(
        request: Request,
        body: body_model,  # type: ignore[valid-type]
        proxy: ServiceProxy = Depends(get_service_proxy),
    ) -> Response:
        payload = body.model_dump(mode="json", by_alias=True, exclude_unset=True)
        return await proxy.forward(route.service, route.method, route.upstream_path(request), request, json=payload)

    return forward_with_body


def build_router(routes: List[GatewayRoute] = ROUTES) -> APIRouter:
    router = APIRouter()
    for route in routes:
        router.add_api_route(
            route.path,
            make_endpoint(route),
            methods=[route.method],
            status_code=route.status_code,
            summary=route.summary,
            tags=[route.tag],
            responses=gateway_error_responses,
            name=f"gateway_{route.method.lower()}_{route.path}",
        )
    return router


router = build_router()
