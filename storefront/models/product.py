"""
Storefront API — Product SQLAlchemy Model
==========================================

What:  ORM model for the `products` table and its `product_tags` link table.
How:   Variants, images, packaging and the accordion are small embedded
       documents, stored as JSON columns. Tags are a many-to-many relation.

Invariants enforced here:
    - slug is unique (database constraint) and derived from title by the
      `before_insert` listener when absent; it is never recomputed afterwards
    - discounted prices are derived on read (see `discounted_prices`), never stored

Field-level constraints (lengths, ranges, URL patterns, non-empty lists) are
enforced by the pydantic schemas in storefront.schemas.product before a row
is built.
"""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    event,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.constants import SLUG_MAX_LENGTH
from storefront.database import Base
from storefront.models.common import (
    OBJECT_ID_LENGTH,
    created_at_column,
    object_id_pk,
    updated_at_column,
)
from storefront.models.tag import Tag
from storefront.slugs import ensure_slug


product_tags = Table(
    "product_tags",
    Base.metadata,
    Column(
        "product_id",
        String(OBJECT_ID_LENGTH),
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        String(OBJECT_ID_LENGTH),
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Product(Base):
    """
    A sellable catalog item with one or more size/price/stock variants.

    Query Patterns:
        - Storefront listing: WHERE category = :c AND is_active
          → idx_products_category_active
        - Product page: WHERE slug = :slug → unique index on slug
    """

    __tablename__ = "products"

    id: Mapped[str] = object_id_pk()

    title: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    discount_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    brand: Mapped[str] = mapped_column(String(50), nullable=False)

    slug: Mapped[str] = mapped_column(String(SLUG_MAX_LENGTH), nullable=False, unique=True)

    rating: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    category: Mapped[str] = mapped_column(String(50), nullable=False)

    thumbnail: Mapped[str] = mapped_column(String(2048), nullable=False)
    product_bg: Mapped[str] = mapped_column(String(2048), nullable=False)

    # [url, ...], never empty
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # [{"size": str, "price": float, "stock": int}, ...], never empty
    variants: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # ["Bottle" | "Box" | "Canister", ...]
    packaging: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # {"details": str, "shipping": str, "returns": str}
    accordion: Mapped[Dict[str, str]] = mapped_column(JSON, nullable=False)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    created_at: Mapped[datetime] = created_at_column()
    updated_at: Mapped[datetime] = updated_at_column()

    # selectin: async sessions cannot lazy-load on attribute access
    tags: Mapped[List[Tag]] = relationship(
        Tag,
        secondary=product_tags,
        lazy="selectin",
        order_by=Tag.name,
    )

    __table_args__ = (
        Index("idx_products_category_active", "category", "is_active"),
    )

    @property
    def tag_ids(self) -> List[str]:
        return [tag.id for tag in self.tags]

    @property
    def discounted_prices(self) -> List[Dict[str, Any]]:
        """Per-variant price after applying discount_percentage."""
        discount = self.discount_percentage or 0
        return [
            {
                "size": variant["size"],
                "discounted_price": variant["price"] - (variant["price"] * discount) / 100,
            }
            for variant in self.variants or []
        ]

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, slug='{self.slug}', active={self.is_active})>"


@event.listens_for(Product, "before_insert")
def _derive_product_slug(mapper, connection, target: Product) -> None:
    target.slug = ensure_slug(target.slug, target.title)
