"""
Database model for categories.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from storefront.db.session import Base


class Category(Base):
    """
    Database model for categories.
    """

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    items = relationship(
        "Item",
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="Item.created_at.desc()",
    )
