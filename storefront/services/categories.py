"""Business logic for categories."""

from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.core.exceptions import ConflictError, NotFoundError
from storefront.core.metrics import record_business_event
from storefront.db.models.category import Category
from storefront.schemas.catalog import CategoryCreate, CategoryUpdate
from storefront.services.slug import derive_slug, generate_unique_slug


class CategoryService:
    """Service for category-related operations."""

    def __init__(self, db: AsyncSession):
        """Initialize with database session."""
        self.db = db

    async def create(self, category_data: CategoryCreate) -> Category:
        """Create a new category, deriving a unique slug from the name when none is given."""
        if category_data.slug:
            slug = category_data.slug
            if await self._find_by_slug(slug) is not None:
                raise ConflictError(f"Category with slug '{slug}' already exists")
        else:
            slug = derive_slug(category_data.name)
            if await self._find_by_slug(slug) is not None:
                slug = generate_unique_slug(slug, await self._all_slugs())

        category = Category(name=category_data.name, slug=slug)
        self.db.add(category)
        await self._commit(slug)

        logger.info(f"Created category {category.id} with slug '{slug}'")
        record_business_event("category_created")
        return await self.find_one(str(category.id))

    async def find_all(self) -> List[Category]:
        """Get all categories with their items, newest first."""
        query = (
            select(Category)
            .options(selectinload(Category.items))
            .order_by(Category.created_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_one(self, category_id: str) -> Category:
        query = (
            select(Category)
            .where(Category.id == category_id)
            .options(selectinload(Category.items))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        category = result.scalar_one_or_none()

        if not category:
            raise NotFoundError(f"Category with ID {category_id} not found")

        return category

    async def find_by_slug(self, slug: str) -> Category:
        query = (
            select(Category)
            .where(Category.slug == slug)
            .options(selectinload(Category.items))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        category = result.scalar_one_or_none()

        if not category:
            raise NotFoundError(f"Category with slug '{slug}' not found")

        return category

    async def update(self, category_id: str, category_data: CategoryUpdate) -> Category:
        """Update an existing category."""
        category = await self.find_one(category_id)

        if category_data.slug:
            existing = await self._find_by_slug(category_data.slug)
            if existing is not None and existing.id != category.id:
                raise ConflictError(f"Category with slug '{category_data.slug}' already exists")
            category.slug = category_data.slug
        elif category_data.name:
            new_slug = derive_slug(category_data.name)
            existing = await self._find_by_slug(new_slug)
            if existing is None:
                category.slug = new_slug
            elif existing.id != category.id:
                others = [slug for slug in await self._all_slugs() if slug != category.slug]
                category.slug = generate_unique_slug(new_slug, others)

        if category_data.name:
            category.name = category_data.name

        await self._commit(str(category.slug))

        logger.info(f"Updated category {category_id}")
        return await self.find_one(category_id)

    async def remove(self, category_id: str) -> None:
        """Delete a category together with its items."""
        category = await self.find_one(category_id)

        await self.db.delete(category)
        await self.db.commit()

        logger.info(f"Deleted category {category_id}")
        record_business_event("category_deleted")

    async def _find_by_slug(self, slug: str) -> Optional[Category]:
        result = await self.db.execute(select(Category).where(Category.slug == slug))
        return result.scalar_one_or_none()

    async def _all_slugs(self) -> List[str]:
        result = await self.db.execute(select(Category.slug))
        return list(result.scalars().all())

    async def _commit(self, slug: str) -> None:
        # The unique index on slug is authoritative; the pre-checks above can race.
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"Slug '{slug}' was taken concurrently")
            raise ConflictError(f"Category with slug '{slug}' already exists")

