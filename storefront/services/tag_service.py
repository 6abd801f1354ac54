"""
Storefront API — Tag Service
=============================

CRUD for tags plus `resolve_tags`, which the product service uses to check
that every tag id on a product write points at an existing Tag.
"""

import logging
from typing import List, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ReferenceIntegrityError,
)
from storefront.models.product import product_tags
from storefront.models.tag import Tag

logger = logging.getLogger(__name__)


class TagService:

    async def list_tags(self, db: AsyncSession) -> List[Tag]:
        result = await db.execute(select(Tag).order_by(Tag.name))
        return list(result.scalars().all())

    async def get_tag(self, db: AsyncSession, tag_id: str) -> Tag:
        tag = await db.get(Tag, tag_id.lower())
        if tag is None:
            raise NotFoundError(resource="tag", resource_id=tag_id)
        return tag

    async def create_tag(self, db: AsyncSession, name: str) -> Tag:
        tag = Tag(name=name)
        db.add(tag)
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(message="A tag with this name already exists", field="name")
        except SQLAlchemyError as e:
            logger.error("Database error creating tag: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})
        logger.info("Tag created: %s (%s)", tag.id, tag.slug)
        return tag

    async def delete_tag(self, db: AsyncSession, tag_id: str) -> None:
        tag = await self.get_tag(db, tag_id)
        # Detach from products first; SQLite does not run the FK cascade
        await db.execute(delete(product_tags).where(product_tags.c.tag_id == tag.id))
        await db.delete(tag)
        await db.flush()
        logger.info("Tag deleted: %s", tag_id)

    async def resolve_tags(self, db: AsyncSession, tag_ids: Sequence[str]) -> List[Tag]:
        """
        Load the Tags for `tag_ids`, preserving request order.

        Raises:
            ReferenceIntegrityError: one or more ids do not resolve (→ 400)
        """
        if not tag_ids:
            return []
        result = await db.execute(select(Tag).where(Tag.id.in_(list(tag_ids))))
        found = {tag.id: tag for tag in result.scalars().all()}
        missing = [tag_id for tag_id in tag_ids if tag_id not in found]
        if missing:
            raise ReferenceIntegrityError(
                message="One or more tags are invalid.",
                field="tags",
                missing_ids=missing,
            )
        return [found[tag_id] for tag_id in tag_ids]


tag_service = TagService()
