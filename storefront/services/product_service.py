"""
Storefront API — Product Service (Controller Layer)
====================================================

What:  CRUD and listing for products.
How:   Bodies arrive as validated ProductCreate / ProductUpdate schemas. The
       service resolves tag references, builds or patches the Product row,
       and flushes so that a duplicate slug surfaces as ConflictError.
Who:   Called by storefront.routes.products.

Write Flow (POST /api/products):
    ┌───────────────┐   ┌──────────────┐   ┌───────────────┐   ┌─────────┐
    │ ProductCreate │──▶│ resolve tags │──▶│ before_insert │──▶│  flush  │
    │  (validated)  │   │ (400 if any  │   │ derives slug  │   │ 409 on  │
    └───────────────┘   │   missing)   │   │ if absent     │   │ dup slug│
                        └──────────────┘   └───────────────┘   └─────────┘

Slug policy:
    A slug is derived once, on insert. Updating the title does not touch it;
    only an explicit `slug` in an update changes it. Collisions are reported
    to the caller (409); nothing is suffixed or retried.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.exceptions import ConflictError, DatabaseError, NotFoundError
from storefront.models.common import utcnow
from storefront.models.product import Product
from storefront.schemas.product import ProductCreate, ProductUpdate
from storefront.services.tag_service import tag_service

logger = logging.getLogger(__name__)


@dataclass
class ProductPage:
    products: List[Product]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class ProductService:
    """
    Responsibilities:
        - list_products(): filtered, paginated listing
        - get_product() / get_product_by_slug(): single product or NotFoundError
        - create_product(): insert with tag resolution and slug derivation
        - update_product(): partial update
        - delete_product(): hard delete
    """

    async def list_products(
        self,
        db: AsyncSession,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> ProductPage:
        """
        List products newest first.

        Filters:
            category:  exact match on Product.category
            is_active: only active / only inactive; None for both
            search:    case-insensitive substring of title or description
        """
        filters = []
        if category:
            filters.append(Product.category == category)
        if is_active is not None:
            filters.append(Product.is_active == is_active)
        if search:
            pattern = f"%{search.strip()}%"
            filters.append(or_(Product.title.ilike(pattern), Product.description.ilike(pattern)))

        try:
            query = (
                select(Product)
                .where(*filters)
                .order_by(Product.created_at.desc(), Product.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            result = await db.execute(query)
            products = list(result.scalars().all())

            count_result = await db.execute(select(func.count(Product.id)).where(*filters))
            total = count_result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing products: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve products. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return ProductPage(products=products, total=total, page=page, limit=limit)

    async def get_product(self, db: AsyncSession, product_id: str) -> Product:
        product = await db.get(Product, product_id.lower())
        if product is None:
            raise NotFoundError(resource="product", resource_id=product_id)
        return product

    async def get_product_by_slug(self, db: AsyncSession, slug: str) -> Product:
        result = await db.execute(select(Product).where(Product.slug == slug.lower()))
        product = result.scalar_one_or_none()
        if product is None:
            raise NotFoundError(resource="product", resource_id=slug)
        return product

    async def create_product(self, db: AsyncSession, data: ProductCreate) -> Product:
        tags = await tag_service.resolve_tags(db, data.tags)

        product = Product(**data.to_columns())
        product.tags = tags
        db.add(product)
        await self._flush(db, "create")

        logger.info("Product created: %s (slug=%s)", product.id, product.slug)
        return product

    async def update_product(
        self,
        db: AsyncSession,
        product_id: str,
        data: ProductUpdate,
    ) -> Product:
        product = await self.get_product(db, product_id)
        changes = data.changes()

        if data.tags is not None:
            product.tags = await tag_service.resolve_tags(db, data.tags)

        for attribute, value in changes.items():
            setattr(product, attribute, value)
        product.updated_at = utcnow()

        await self._flush(db, "update")
        logger.info("Product updated: %s fields=%s", product.id, sorted(data.model_fields_set))
        return product

    async def delete_product(self, db: AsyncSession, product_id: str) -> None:
        product = await self.get_product(db, product_id)
        await db.delete(product)
        await self._flush(db, "delete")
        logger.info("Product deleted: %s", product_id)

    async def _flush(self, db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Integrity error on product %s: %s", action, str(e.orig))
            raise ConflictError(
                message="A product with this slug already exists",
                field="slug",
                context={"action": action},
            )
        except SQLAlchemyError as e:
            logger.error("Database error on product %s: %s", action, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the product. Please try again.",
                context={"action": action, "error_type": type(e).__name__},
            )


product_service = ProductService()
