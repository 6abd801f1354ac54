"""
Storefront API — Tag SQLAlchemy Model
======================================

Tags label products. Both the name and the derived slug are unique, and the
slug is filled in by a `before_insert` listener when the caller leaves it
empty.
"""

from datetime import datetime

from sqlalchemy import String, event
from sqlalchemy.orm import Mapped, mapped_column

from storefront.constants import SLUG_MAX_LENGTH
from storefront.database import Base
from storefront.models.common import created_at_column, object_id_pk
from storefront.slugs import ensure_slug


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[str] = object_id_pk()
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(SLUG_MAX_LENGTH), nullable=False, unique=True)
    created_at: Mapped[datetime] = created_at_column()

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, slug='{self.slug}')>"


@event.listens_for(Tag, "before_insert")
def _derive_tag_slug(mapper, connection, target: Tag) -> None:
    target.slug = ensure_slug(target.slug, target.name)
