"""
Storefront API — Domain Constants
==================================

Fixed literal sets shared by the validation rules, pydantic schemas, and ORM
models. Changing a value here changes what every layer accepts.
"""

from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"


# Roles allowed through the gate on every mutating catalog route
ADMIN_ROLES = (UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value)


class CategoryType(str, Enum):
    PRODUCT = "product"
    BLOG = "blog"


CATEGORY_TYPES = tuple(t.value for t in CategoryType)

# Product.category is a closed set, independent of the Category tree
PRODUCT_CATEGORIES = ("Beverages", "Snacks", "Health", "Other")

PACKAGING_TYPES = ("Bottle", "Box", "Canister")

# Case-insensitive; matches absolute http(s) URLs ending in an image extension
IMAGE_URL_PATTERN = r"^https?://.+\.(jpg|jpeg|png|gif)$"

SLUG_MAX_LENGTH = 100
