"""
Database models.
"""

from storefront.db.models.category import Category
from storefront.db.models.item import Item
from storefront.db.models.user import User, UserRole

__all__ = [
    "Category",
    "Item",
    "User",
    "UserRole",
]
