"""
Storefront API — Product Schemas
=================================

What:  The product document contract: field types, lengths, ranges, enum
       sets, URL patterns and non-empty lists.
Why:   This is the model layer's gatekeeper. A ProductCreate that validates
       maps one-to-one onto a Product row; ProductUpdate carries the same
       constraints with every field optional (partial update).
How:   Reusable constrained types (ImageUrl, ObjectIdStr) are Annotated
       aliases; whole-list rules live in field validators.

Constraint summary:
    title               3–100 chars
    description         1–1000 chars
    discountPercentage  0–100
    brand               1–50 chars
    slug                optional, lowercase hyphenated, ≤100 chars
    rating              0–5, default 0
    category            Beverages | Snacks | Health | Other
    thumbnail/productBG http(s) URL ending in .jpg/.jpeg/.png/.gif
    images              non-empty list of image URLs
    variants            non-empty list of {size ≤20, price ≥0, stock ≥0}
    packaging           list of Bottle | Box | Canister
    accordion           {details, shipping, returns}, each ≤1000 chars
    tags                list of Tag ids (existence checked by the service)
"""

import re
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import AfterValidator, Field, field_validator, model_validator

from storefront.constants import IMAGE_URL_PATTERN, SLUG_MAX_LENGTH
from storefront.schemas.common import APIInputModel, APIModel
from storefront.schemas.tag import TagOut
from storefront.slugs import slugify
from storefront.validation import is_mongo_id

_IMAGE_URL = re.compile(IMAGE_URL_PATTERN, re.IGNORECASE)
_SLUG = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

ProductCategory = Literal["Beverages", "Snacks", "Health", "Other"]
PackagingType = Literal["Bottle", "Box", "Canister"]


def _check_image_url(value: str) -> str:
    if not _IMAGE_URL.match(value):
        raise ValueError("Please enter a valid image URL")
    return value


def _check_object_id(value: str) -> str:
    if not is_mongo_id(value):
        raise ValueError("Invalid tag ID")
    return value.lower()


def _check_slug(value: str) -> str:
    value = value.lower()
    if not _SLUG.match(value):
        raise ValueError("Slug may only contain lowercase letters, digits and single hyphens")
    return value


ImageUrl = Annotated[str, AfterValidator(_check_image_url)]
ObjectIdStr = Annotated[str, AfterValidator(_check_object_id)]
Slug = Annotated[str, Field(min_length=1, max_length=SLUG_MAX_LENGTH), AfterValidator(_check_slug)]


# ══════════════════════════════════════════════════════════════════════════
# Embedded documents
# ══════════════════════════════════════════════════════════════════════════

class VariantIn(APIInputModel):
    size: str = Field(min_length=1, max_length=20)
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)


class AccordionIn(APIInputModel):
    details: str = Field(min_length=1, max_length=1000)
    shipping: str = Field(min_length=1, max_length=1000)
    returns: str = Field(min_length=1, max_length=1000)


def _non_empty(items: Optional[List[Any]], what: str) -> Optional[List[Any]]:
    if items is not None and len(items) == 0:
        raise ValueError(f"Product must have at least one {what}")
    return items


def _unique(items: Optional[List[str]]) -> Optional[List[str]]:
    if items is None:
        return None
    return list(dict.fromkeys(items))


# ══════════════════════════════════════════════════════════════════════════
# Request bodies
# ══════════════════════════════════════════════════════════════════════════

class ProductCreate(APIInputModel):
    title: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    discount_percentage: float = Field(ge=0, le=100)
    brand: str = Field(min_length=1, max_length=50)
    slug: Optional[Slug] = None
    rating: float = Field(default=0, ge=0, le=5)
    category: ProductCategory
    thumbnail: ImageUrl
    product_bg: ImageUrl = Field(alias="productBG")
    images: List[ImageUrl]
    variants: List[VariantIn]
    packaging: List[PackagingType]
    accordion: AccordionIn
    tags: List[ObjectIdStr] = Field(default_factory=list)
    is_active: bool = True

    @field_validator("images")
    @classmethod
    def images_not_empty(cls, v):
        return _non_empty(v, "image")

    @field_validator("variants")
    @classmethod
    def variants_not_empty(cls, v):
        return _non_empty(v, "variant")

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v):
        return _unique(v)

    @model_validator(mode="after")
    def title_yields_slug(self):
        """Without an explicit slug the title must contain letters or digits."""
        if not self.slug and not slugify(self.title):
            raise ValueError("Title must contain letters or digits to derive a slug")
        return self

    def to_columns(self) -> Dict[str, Any]:
        """Column values for a new Product row (tags are resolved separately)."""
        return self.model_dump(exclude={"tags"})


class ProductUpdate(APIInputModel):
    """Partial update: absent fields keep their stored value; null is rejected."""

    title: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    discount_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    brand: Optional[str] = Field(default=None, min_length=1, max_length=50)
    slug: Optional[Slug] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    category: Optional[ProductCategory] = None
    thumbnail: Optional[ImageUrl] = None
    product_bg: Optional[ImageUrl] = Field(default=None, alias="productBG")
    images: Optional[List[ImageUrl]] = None
    variants: Optional[List[VariantIn]] = None
    packaging: Optional[List[PackagingType]] = None
    accordion: Optional[AccordionIn] = None
    tags: Optional[List[ObjectIdStr]] = None
    is_active: Optional[bool] = None

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("images")
    @classmethod
    def images_not_empty(cls, v):
        return _non_empty(v, "image")

    @field_validator("variants")
    @classmethod
    def variants_not_empty(cls, v):
        return _non_empty(v, "variant")

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v):
        return _unique(v)

    def changes(self) -> Dict[str, Any]:
        """Only the fields the client actually sent, tags excluded."""
        return self.model_dump(exclude_unset=True, exclude={"tags"})


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════

class VariantOut(APIModel):
    size: str
    price: float
    stock: int = 0


class AccordionOut(APIModel):
    details: str
    shipping: str
    returns: str


class DiscountedPrice(APIModel):
    size: str
    discounted_price: float


class ProductOut(APIModel):
    id: str
    title: str
    description: str
    discount_percentage: float
    brand: str
    slug: str
    rating: float
    category: str
    thumbnail: str
    product_bg: str = Field(alias="productBG")
    images: List[str]
    variants: List[VariantOut]
    packaging: List[str]
    accordion: AccordionOut
    tags: List[TagOut]
    is_active: bool
    created_at: datetime
    updated_at: datetime
    discounted_prices: List[DiscountedPrice]


class ProductEnvelope(APIModel):
    success: bool = True
    product: ProductOut


class ProductListEnvelope(APIModel):
    success: bool = True
    count: int
    total: int
    page: int
    pages: int
    products: List[ProductOut]
