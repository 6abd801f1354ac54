"""
Storefront API — Shared Column Helpers
=======================================

Every table uses a Mongo-style ObjectId string as its primary key so ids keep
the 24-hex shape API clients already validate, and UTC-aware timestamps.
"""

from datetime import datetime, timezone

from bson import ObjectId
from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

OBJECT_ID_LENGTH = 24


def new_object_id() -> str:
    return str(ObjectId())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def object_id_pk() -> Mapped[str]:
    return mapped_column(
        String(OBJECT_ID_LENGTH),
        primary_key=True,
        default=new_object_id,
        comment="ObjectId hex string",
    )


def created_at_column() -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="When the row was created (UTC)",
    )


def updated_at_column() -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        comment="When the row was last modified (UTC)",
    )
