"""
Pydantic schemas for the categories and items resources.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from storefront.schemas.base import CamelModel, Price, RequestModel
from storefront.services.slug import is_valid_slug


class SlugMixin(RequestModel):
    """
    Rejects caller-supplied slugs that are not lowercase, hyphen-separated words.
    """

    slug: Optional[str] = Field(None, min_length=1, max_length=255, description="URL-friendly slug")

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_valid_slug(v):
            raise ValueError("slug may only contain lowercase letters, numbers and single hyphens")
        return v


class CategoryCreate(SlugMixin):
    """
    Schema for creating a new category.
    """

    name: str = Field(..., min_length=1, max_length=255, description="Category name")


class CategoryUpdate(SlugMixin):
    """
    Schema for updating an existing category.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Category name")


class ItemCreate(SlugMixin):
    """
    Schema for creating a new item.
    """

    name: str = Field(..., min_length=1, max_length=255, description="Item name")
    description: Optional[str] = Field(None, description="Item description")
    price: Price = Field(..., gt=0, max_digits=10, decimal_places=2, description="Item price")
    category_id: UUID = Field(..., description="ID of the owning category")


class ItemUpdate(SlugMixin):
    """
    Schema for updating an existing item.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Item name")
    description: Optional[str] = Field(None, description="Item description")
    price: Optional[Price] = Field(None, gt=0, max_digits=10, decimal_places=2, description="Item price")
    category_id: Optional[UUID] = Field(None, description="ID of the owning category")


class CategorySummary(CamelModel):
    """
    Category fields without the owned items.
    """

    id: str = Field(..., description="Category ID")
    name: str = Field(..., description="Category name")
    slug: str = Field(..., description="URL-friendly slug")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class ItemSummary(CamelModel):
    """
    Item fields without the owning category.
    """

    id: str = Field(..., description="Item ID")
    name: str = Field(..., description="Item name")
    slug: str = Field(..., description="URL-friendly slug")
    description: Optional[str] = Field(None, description="Item description")
    price: Price = Field(..., description="Item price")
    category_id: str = Field(..., description="Category ID")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class CategoryResponse(CategorySummary):
    """
    Schema for category response.
    """

    items: List[ItemSummary] = Field(default_factory=list, description="Items in this category")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "123e4567-e89b-12d3-a456-426614174000",
                    "name": "Electronics",
                    "slug": "electronics",
                    "items": [],
                    "createdAt": "2024-01-15T10:30:00Z",
                    "updatedAt": "2024-01-15T10:30:00Z",
                }
            ]
        },
    }


class ItemResponse(ItemSummary):
    """
    Schema for item response.
    """

    category: Optional[CategorySummary] = Field(None, description="Owning category")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "5f0c3a9e-2b7d-4a61-9d3e-0c1b2a3d4e5f",
                    "name": "iPhone 15 Pro",
                    "slug": "iphone-15-pro",
                    "description": "Latest iPhone with titanium design",
                    "price": 999.99,
                    "categoryId": "123e4567-e89b-12d3-a456-426614174000",
                    "createdAt": "2024-01-15T10:30:00Z",
                    "updatedAt": "2024-01-15T10:30:00Z",
                }
            ]
        },
    }
