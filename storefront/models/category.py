"""
Storefront API — Category SQLAlchemy Model
===========================================

What:  ORM model for the `categories` table.
How:   Categories form a tree through `parent_id`, a self-referencing foreign
       key. The tree is walked by id in the service layer; no in-memory
       object graph is loaded.

Table Design Rationale:
    - type: 'product' or 'blog'; the same tree table serves both catalogs
    - parent_id: nullable, ON DELETE SET NULL so removing a node detaches its
      children instead of cascading
    - is_active: soft-disable flag, defaults to true
    - Index on (type, is_active): the public listing filters on both
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database import Base
from storefront.models.common import (
    OBJECT_ID_LENGTH,
    created_at_column,
    object_id_pk,
    updated_at_column,
)


class Category(Base):
    """
    A node in the product/blog category tree.

    Lifecycle:
        1. Created by an admin (POST /api/categories)
        2. Renamed, re-parented or deactivated (PUT, partial)
        3. Deleted (DELETE); children are detached, not removed
    """

    __tablename__ = "categories"

    id: Mapped[str] = object_id_pk()

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Category catalog: product, blog",
    )

    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    parent_id: Mapped[Optional[str]] = mapped_column(
        String(OBJECT_ID_LENGTH),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    created_at: Mapped[datetime] = created_at_column()
    updated_at: Mapped[datetime] = updated_at_column()

    __table_args__ = (
        Index("idx_categories_type_active", "type", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}', type='{self.type}')>"
