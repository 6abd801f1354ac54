"""
Storefront API — Category Service (Controller Layer)
=====================================================

What:  CRUD for the category tree.
How:   Receives an AsyncSession per call; validates references (parent must
       exist, no cycles) before writing, flushes inside the call so database
       errors surface here rather than at commit time.
Who:   Called by storefront.routes.categories.

Request payloads arrive already shape-checked (and trimmed) by the route rule
sets and use the API's camelCase keys (`isActive`, `parent`). Ids are stored
lowercase; lookups lowercase what they are given.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.exceptions import (
    DatabaseError,
    NotFoundError,
    ReferenceIntegrityError,
    ValidationError,
)
from storefront.models.category import Category
from storefront.models.common import utcnow

logger = logging.getLogger(__name__)

# API key → column attribute
_FIELD_MAP = {
    "name": "name",
    "type": "type",
    "description": "description",
    "parent": "parent_id",
    "isActive": "is_active",
}


class CategoryService:
    """
    Responsibilities:
        - list_categories(): all categories, optionally one type
        - get_category(): single category or NotFoundError
        - create_category(): insert after parent check
        - update_category(): partial update; absent fields keep stored values
        - delete_category(): remove and detach children
    """

    async def list_categories(
        self,
        db: AsyncSession,
        category_type: Optional[str] = None,
    ) -> List[Category]:
        query = select(Category).order_by(Category.name)
        if category_type:
            query = query.where(Category.type == category_type)
        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing categories: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve categories. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_category(self, db: AsyncSession, category_id: str) -> Category:
        category = await db.get(Category, category_id.lower())
        if category is None:
            raise NotFoundError(resource="category", resource_id=category_id)
        return category

    async def create_category(self, db: AsyncSession, payload: Dict[str, Any]) -> Category:
        parent_id = payload.get("parent")
        if parent_id:
            await self._ensure_parent_exists(db, parent_id)

        category = Category(
            name=payload["name"],
            type=payload["type"],
            description=payload.get("description"),
            parent_id=parent_id,
        )
        db.add(category)
        await self._flush(db, "create")
        logger.info("Category created: %s (%s)", category.id, category.name)
        return category

    async def update_category(
        self,
        db: AsyncSession,
        category_id: str,
        payload: Dict[str, Any],
    ) -> Category:
        category = await self.get_category(db, category_id)

        if "parent" in payload and payload["parent"] is not None:
            await self._check_new_parent(db, category, payload["parent"])

        for key, value in payload.items():
            attribute = _FIELD_MAP.get(key)
            if attribute is not None:
                setattr(category, attribute, value)
        category.updated_at = utcnow()

        await self._flush(db, "update")
        logger.info("Category updated: %s fields=%s", category.id, sorted(payload))
        return category

    async def delete_category(self, db: AsyncSession, category_id: str) -> None:
        category = await self.get_category(db, category_id)

        # Children survive as roots; the FK also says SET NULL but SQLite
        # does not enforce foreign keys by default.
        await db.execute(
            update(Category)
            .where(Category.parent_id == category.id)
            .values(parent_id=None)
        )
        await db.delete(category)
        await self._flush(db, "delete")
        logger.info("Category deleted: %s", category_id)

    # ── Reference checks ──────────────────────────────────────────────────

    async def _ensure_parent_exists(self, db: AsyncSession, parent_id: str) -> Category:
        parent = await db.get(Category, parent_id.lower())
        if parent is None:
            raise ReferenceIntegrityError(
                message="Parent category not found",
                field="parent",
                missing_ids=[parent_id],
            )
        return parent

    async def _check_new_parent(self, db: AsyncSession, category: Category, parent_id: str) -> None:
        """Parent must exist and must not be the category itself or one of its descendants."""
        if parent_id.lower() == category.id:
            raise ValidationError(errors={"parent": "A category cannot be its own parent"})

        ancestor: Optional[Category] = await self._ensure_parent_exists(db, parent_id)
        seen = set()
        while ancestor is not None and ancestor.parent_id and ancestor.id not in seen:
            seen.add(ancestor.id)
            if ancestor.parent_id == category.id:
                raise ValidationError(
                    errors={"parent": "A category cannot be moved under one of its descendants"}
                )
            ancestor = await db.get(Category, ancestor.parent_id)

    async def _flush(self, db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error on category %s: %s", action, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the category. Please try again.",
                context={"action": action, "error_type": type(e).__name__},
            )


category_service = CategoryService()
