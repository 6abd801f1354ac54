"""
Storefront API — User SQLAlchemy Model
=======================================

What:  The identity record the authorization gate reads.
How:   Clients authenticate with an opaque bearer token; only its SHA-256 hex
       digest is stored (`token_hash`). Issuing tokens happens outside this
       service, so there are no user-management routes.
"""

from datetime import datetime

from sqlalchemy import Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.constants import UserRole
from storefront.database import Base
from storefront.models.common import created_at_column, object_id_pk


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = object_id_pk()
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    # user, admin, super-admin
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
        server_default=text(f"'{UserRole.USER.value}'"),
    )

    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    created_at: Mapped[datetime] = created_at_column()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
