from typing import Any, List

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_category_service
from storefront.api.responses import (
    HTTP_201_CREATED,
    ApiResponse,
    Tags,
    default_error_responses,
    success_response,
    write_error_responses,
)
from storefront.schemas.catalog import CategoryCreate, CategoryResponse, CategoryUpdate
from storefront.services.categories import CategoryService

router = APIRouter(prefix="/categories", tags=[Tags.CATEGORIES])


@router.post(
    "",
    response_model=ApiResponse[CategoryResponse],
    status_code=HTTP_201_CREATED,
    summary="Create a category.",
    description="Creates a category. The slug is derived from the name when omitted and made unique with a numeric suffix.",  # noqa: E501
    responses=write_error_responses,
)
async def create_category(
    category_in: CategoryCreate,
    service: CategoryService = Depends(get_category_service),
) -> Any:
    category = await service.create(category_in)
    return success_response("Category created successfully", CategoryResponse.model_validate(category))


@router.get(
    "",
    response_model=ApiResponse[List[CategoryResponse]],
    summary="List categories.",
    description="Returns every category with its items, newest first.",
    responses=default_error_responses,
)
async def list_categories(service: CategoryService = Depends(get_category_service)) -> Any:
    categories = await service.find_all()
    return success_response(
        "Categories retrieved successfully",
        [CategoryResponse.model_validate(category) for category in categories],
    )


@router.get(
    "/slug/{slug}",
    response_model=ApiResponse[CategoryResponse],
    summary="Get a category by slug.",
    responses=default_error_responses,
)
async def get_category_by_slug(slug: str, service: CategoryService = Depends(get_category_service)) -> Any:
    category = await service.find_by_slug(slug)
    return success_response("Category found successfully", CategoryResponse.model_validate(category))


@router.get(
    "/{category_id}",
    response_model=ApiResponse[CategoryResponse],
    summary="Get a category by ID.",
    responses=default_error_responses,
)
async def get_category(category_id: str, service: CategoryService = Depends(get_category_service)) -> Any:
    category = await service.find_one(category_id)
    return success_response("Category found successfully", CategoryResponse.model_validate(category))


@router.patch(
    "/{category_id}",
    response_model=ApiResponse[CategoryResponse],
    summary="Update a category.",
    description="Updates name and/or slug. A new name regenerates the slug unless a slug is given explicitly.",
    responses=write_error_responses,
)
async def update_category(
    category_id: str,
    category_in: CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
) -> Any:
    category = await service.update(category_id, category_in)
    return success_response("Category updated successfully", CategoryResponse.model_validate(category))


@router.delete(
    "/{category_id}",
    response_model=ApiResponse[None],
    summary="Delete a category.",
    description="Deletes the category together with all of its items.",
    responses=default_error_responses,
)
async def delete_category(category_id: str, service: CategoryService = Depends(get_category_service)) -> Any:
    await service.remove(category_id)
    return success_response("Category deleted successfully")
