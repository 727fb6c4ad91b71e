"""Business logic for items."""

from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.core.exceptions import ConflictError, NotFoundError
from storefront.core.metrics import record_business_event
from storefront.db.models.category import Category
from storefront.db.models.item import Item
from storefront.schemas.catalog import ItemCreate, ItemUpdate
from storefront.services.slug import derive_slug, generate_unique_slug


class ItemService:
    """Service for item-related operations."""

    def __init__(self, db: AsyncSession):
        """Initialize with database session."""
        self.db = db

    async def create(self, item_data: ItemCreate) -> Item:
        """Create a new item inside an existing category."""
        category_id = str(item_data.category_id)
        await self._ensure_category(category_id)

        if item_data.slug:
            slug = item_data.slug
            if await self._find_by_slug(slug) is not None:
                raise ConflictError(f"Item with slug '{slug}' already exists")
        else:
            slug = derive_slug(item_data.name)
            if await self._find_by_slug(slug) is not None:
                slug = generate_unique_slug(slug, await self._all_slugs())

        item = Item(
            name=item_data.name,
            slug=slug,
            description=item_data.description,
            price=item_data.price,
            category_id=category_id,
        )
        self.db.add(item)
        await self._commit(slug, category_id)

        logger.info(f"Created new item with ID {item.id}")
        record_business_event("item_created")
        return await self.find_one(str(item.id))

    async def find_all(self) -> List[Item]:
        """Get all items with their category, newest first."""
        query = (
            select(Item)
            .options(selectinload(Item.category))
            .order_by(Item.created_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_one(self, item_id: str) -> Item:
        """Get a specific item by ID."""
        query = (
            select(Item)
            .where(Item.id == item_id)
            .options(selectinload(Item.category))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        item = result.scalar_one_or_none()

        if not item:
            raise NotFoundError(f"Item with ID {item_id} not found")

        return item

    async def find_by_slug(self, slug: str) -> Item:
        query = (
            select(Item)
            .where(Item.slug == slug)
            .options(selectinload(Item.category))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        item = result.scalar_one_or_none()

        if not item:
            raise NotFoundError(f"Item with slug '{slug}' not found")

        return item

    async def find_by_category(self, category_id: str) -> List[Item]:
        """Get the items of one category, newest first."""
        await self._ensure_category(category_id)

        query = (
            select(Item)
            .where(Item.category_id == category_id)
            .options(selectinload(Item.category))
            .order_by(Item.created_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update(self, item_id: str, item_data: ItemUpdate) -> Item:
        """Update an existing item."""
        item = await self.find_one(item_id)

        if item_data.category_id is not None:
            category_id = str(item_data.category_id)
            await self._ensure_category(category_id)
            item.category_id = category_id

        if item_data.slug:
            existing = await self._find_by_slug(item_data.slug)
            if existing is not None and existing.id != item.id:
                raise ConflictError(f"Item with slug '{item_data.slug}' already exists")
            item.slug = item_data.slug
        elif item_data.name:
            new_slug = derive_slug(item_data.name)
            existing = await self._find_by_slug(new_slug)
            if existing is None:
                item.slug = new_slug
            elif existing.id != item.id:
                others = [slug for slug in await self._all_slugs() if slug != item.slug]
                item.slug = generate_unique_slug(new_slug, others)

        if item_data.name:
            item.name = item_data.name
        if "description" in item_data.model_fields_set:
            item.description = item_data.description
        if item_data.price is not None:
            item.price = item_data.price

        await self._commit(str(item.slug), str(item.category_id), item_id)

        logger.info(f"Updated item with ID {item_id}")
        return await self.find_one(item_id)

    async def remove(self, item_id: str) -> None:
        """Delete an item."""
        item = await self.find_one(item_id)

        await self.db.delete(item)
        await self.db.commit()

        logger.info(f"Deleted item with ID {item_id}")
        record_business_event("item_deleted")

    async def _category_exists(self, category_id: str) -> bool:
        result = await self.db.execute(select(Category.id).where(Category.id == category_id))
        return result.scalar_one_or_none() is not None

    async def _ensure_category(self, category_id: str) -> None:
        if not await self._category_exists(category_id):
            logger.warning(f"Category with ID {category_id} not found")
            raise NotFoundError(f"Category with ID {category_id} not found")

    async def _find_by_slug(self, slug: str) -> Optional[Item]:
        result = await self.db.execute(select(Item).where(Item.slug == slug))
        return result.scalar_one_or_none()

    async def _all_slugs(self) -> List[str]:
        result = await self.db.execute(select(Item.slug))
        return list(result.scalars().all())

    async def _commit(self, slug: str, category_id: str, item_id: Optional[str] = None) -> None:
        # Either the unique slug index or the category foreign key fired.
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"Item write with slug '{slug}' violated a constraint")

            existing = await self._find_by_slug(slug)
            if existing is not None and str(existing.id) != item_id:
                raise ConflictError(f"Item with slug '{slug}' already exists")
            if not await self._category_exists(category_id):
                raise NotFoundError(f"Category with ID {category_id} not found")
            raise ConflictError("Item conflicts with an existing record")
