from typing import Any, List

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_item_service
from storefront.api.responses import (
    HTTP_201_CREATED,
    ApiResponse,
    Tags,
    default_error_responses,
    success_response,
    write_error_responses,
)
from storefront.schemas.catalog import ItemCreate, ItemResponse, ItemUpdate
from storefront.services.items import ItemService

router = APIRouter(prefix="/items", tags=[Tags.ITEMS])


@router.post(
    "",
    response_model=ApiResponse[ItemResponse],
    status_code=HTTP_201_CREATED,
    summary="Create an item.",
    description="Creates an item in an existing category. The slug is derived from the name when omitted.",
    responses=write_error_responses,
)
async def create_item(item_in: ItemCreate, service: ItemService = Depends(get_item_service)) -> Any:
    item = await service.create(item_in)
    return success_response("Item created successfully", ItemResponse.model_validate(item))


@router.get(
    "",
    response_model=ApiResponse[List[ItemResponse]],
    summary="List items.",
    responses=default_error_responses,
)
async def list_items(service: ItemService = Depends(get_item_service)) -> Any:
    items = await service.find_all()
    return success_response("Items retrieved successfully", [ItemResponse.model_validate(item) for item in items])


@router.get(
    "/slug/{slug}",
    response_model=ApiResponse[ItemResponse],
    summary="Get an item by slug.",
    responses=default_error_responses,
)
async def get_item_by_slug(slug: str, service: ItemService = Depends(get_item_service)) -> Any:
    item = await service.find_by_slug(slug)
    return success_response("Item found successfully", ItemResponse.model_validate(item))


@router.get(
    "/category/{category_id}",
    response_model=ApiResponse[List[ItemResponse]],
    summary="List the items of a category.",
    responses=default_error_responses,
)
async def list_items_by_category(category_id: str, service: ItemService = Depends(get_item_service)) -> Any:
    items = await service.find_by_category(category_id)
    return success_response("Items retrieved successfully", [ItemResponse.model_validate(item) for item in items])


@router.get(
    "/{item_id}",
    response_model=ApiResponse[ItemResponse],
    summary="Get an item by ID.",
    responses=default_error_responses,
)
async def get_item(item_id: str, service: ItemService = Depends(get_item_service)) -> Any:
    item = await service.find_one(item_id)
    return success_response("Item found successfully", ItemResponse.model_validate(item))


@router.patch(
    "/{item_id}",
    response_model=ApiResponse[ItemResponse],
    summary="Update an item.",
    responses=write_error_responses,
)
async def update_item(
    item_id: str,
    item_in: ItemUpdate,
    service: ItemService = Depends(get_item_service),
) -> Any:
    item = await service.update(item_id, item_in)
    return success_response("Item updated successfully", ItemResponse.model_validate(item))


@router.delete(
    "/{item_id}",
    response_model=ApiResponse[None],
    summary="Delete an item.",
    responses=default_error_responses,
)
async def delete_item(item_id: str, service: ItemService = Depends(get_item_service)) -> Any:
    await service.remove(item_id)
    return success_response("Item deleted successfully")
