"""Create catalog tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates users, categories, tags, products and the product_tags link.
How:   Primary keys are 24-character ObjectId hex strings generated by the
       application; embedded product documents are JSON columns.

Rollback: downgrade() drops all five tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID = sa.String(24)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", ID, nullable=False, comment="ObjectId hex string"),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_token_hash", "users", ["token_hash"], unique=True)

    op.create_table(
        "categories",
        sa.Column("id", ID, nullable=False, comment="ObjectId hex string"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, comment="Category catalog: product, blog"),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("parent_id", ID, nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_categories"),
        sa.ForeignKeyConstraint(
            ["parent_id"], ["categories.id"],
            name="fk_categories_parent_id",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_categories_parent_id", "categories", ["parent_id"])
    op.create_index("idx_categories_type_active", "categories", ["type", "is_active"])

    op.create_table(
        "tags",
        sa.Column("id", ID, nullable=False, comment="ObjectId hex string"),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_tags"),
        sa.UniqueConstraint("name", name="uq_tags_name"),
        sa.UniqueConstraint("slug", name="uq_tags_slug"),
    )

    op.create_table(
        "products",
        sa.Column("id", ID, nullable=False, comment="ObjectId hex string"),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("discount_percentage", sa.Float(), nullable=False),
        sa.Column("brand", sa.String(50), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("thumbnail", sa.String(2048), nullable=False),
        sa.Column("product_bg", sa.String(2048), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("variants", sa.JSON(), nullable=False),
        sa.Column("packaging", sa.JSON(), nullable=False),
        sa.Column("accordion", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_products"),
        sa.UniqueConstraint("slug", name="uq_products_slug"),
    )
    op.create_index("ix_products_title", "products", ["title"])
    op.create_index("idx_products_category_active", "products", ["category", "is_active"])
    # Listing order: newest first
    op.create_index(
        "idx_products_created_at_desc",
        "products",
        [sa.text("created_at DESC")],
    )

    op.create_table(
        "product_tags",
        sa.Column("product_id", ID, nullable=False),
        sa.Column("tag_id", ID, nullable=False),
        sa.PrimaryKeyConstraint("product_id", "tag_id", name="pk_product_tags"),
        sa.ForeignKeyConstraint(
            ["product_id"], ["products.id"],
            name="fk_product_tags_product_id",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["tag_id"], ["tags.id"],
            name="fk_product_tags_tag_id",
            ondelete="CASCADE",
        ),
    )


def downgrade() -> None:
    op.drop_table("product_tags")
    op.drop_index("idx_products_created_at_desc", table_name="products")
    op.drop_index("idx_products_category_active", table_name="products")
    op.drop_index("ix_products_title", table_name="products")
    op.drop_table("products")
    op.drop_table("tags")
    op.drop_index("idx_categories_type_active", table_name="categories")
    op.drop_index("ix_categories_parent_id", table_name="categories")
    op.drop_table("categories")
    op.drop_index("ix_users_token_hash", table_name="users")
    op.drop_table("users")
