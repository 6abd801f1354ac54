"""
Storefront API — Product Routes
================================

What:  The /api/products dispatch table.
How:   Bodies are parsed into ProductCreate / ProductUpdate by the
       `validate_model` dependency, which runs before the role gate like the
       rule sets on the category routes.

Route Inventory:
    GET    /api/products               public   ?category=&isActive=&q=&page=&limit=
    GET    /api/products/slug/{slug}   public
    GET    /api/products/{id}          public
    POST   /api/products               admin
    PUT    /api/products/{id}          admin    partial update
    DELETE /api/products/{id}          admin
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.auth import Identity, require_roles
from storefront.config import settings
from storefront.constants import ADMIN_ROLES, PRODUCT_CATEGORIES
from storefront.database import get_db_session
from storefront.exceptions import ValidationError
from storefront.schemas.common import ErrorResponse, MessageResponse
from storefront.schemas.product import (
    ProductCreate,
    ProductEnvelope,
    ProductListEnvelope,
    ProductOut,
    ProductUpdate,
)
from storefront.services.product_service import product_service
from storefront.validation import RuleSet, param, validate_model, validate_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])

id_rules = RuleSet(
    param("id").is_mongo_id(message="Invalid product ID"),
)

_ERRORS = {
    400: {"description": "Validation failed or unknown tag", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Role not allowed", "model": ErrorResponse},
    404: {"description": "Product not found", "model": ErrorResponse},
    409: {"description": "Slug already in use", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=ProductListEnvelope,
    summary="List products",
    description=(
        "Newest first. Filter by category, active flag, or a case-insensitive "
        "search over title and description. Total count is also returned in "
        "the X-Total-Count header."
    ),
)
async def list_products(
    response: Response,
    category: Optional[str] = Query(default=None, description="Beverages, Snacks, Health or Other"),
    is_active: Optional[bool] = Query(default=None, alias="isActive"),
    q: Optional[str] = Query(default=None, max_length=100, description="Search text"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> ProductListEnvelope:
    if category is not None and category not in PRODUCT_CATEGORIES:
        raise ValidationError(
            errors={"category": f"Category must be one of: {', '.join(PRODUCT_CATEGORIES)}"}
        )

    result = await product_service.list_products(
        db,
        category=category,
        is_active=is_active,
        search=q,
        page=page,
        limit=limit,
    )

    response.headers["X-Total-Count"] = str(result.total)

    return ProductListEnvelope(
        count=len(result.products),
        total=result.total,
        page=result.page,
        pages=result.pages,
        products=[ProductOut.model_validate(p) for p in result.products],
    )


@router.get(
    "/slug/{slug}",
    response_model=ProductEnvelope,
    responses={404: _ERRORS[404]},
    summary="Get a product by slug",
)
async def get_product_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_db_session),
) -> ProductEnvelope:
    product = await product_service.get_product_by_slug(db, slug)
    return ProductEnvelope(product=ProductOut.model_validate(product))


@router.get(
    "/{id}",
    response_model=ProductEnvelope,
    responses={k: v for k, v in _ERRORS.items() if k in (400, 404)},
    summary="Get a product by ID",
)
async def get_product(
    id: str,
    _: Dict[str, Any] = Depends(validate_request(id_rules)),
    db: AsyncSession = Depends(get_db_session),
) -> ProductEnvelope:
    product = await product_service.get_product(db, id)
    return ProductEnvelope(product=ProductOut.model_validate(product))


@router.post(
    "",
    status_code=201,
    response_model=ProductEnvelope,
    responses={k: v for k, v in _ERRORS.items() if k != 404},
    summary="Create a product",
    description="The slug is derived from the title when not supplied.",
)
async def create_product(
    data: ProductCreate = Depends(validate_model(ProductCreate)),
    identity: Identity = Depends(require_roles(*ADMIN_ROLES)),
    db: AsyncSession = Depends(get_db_session),
) -> ProductEnvelope:
    product = await product_service.create_product(db, data)
    return ProductEnvelope(product=ProductOut.model_validate(product))


@router.put(
    "/{id}",
    response_model=ProductEnvelope,
    responses=_ERRORS,
    summary="Update a product",
    description="Partial update: fields left out of the body keep their stored value.",
)
async def update_product(
    id: str,
    _: Dict[str, Any] = Depends(validate_request(id_rules)),
    data: ProductUpdate = Depends(validate_model(ProductUpdate)),
    identity: Identity = Depends(require_roles(*ADMIN_ROLES)),
    db: AsyncSession = Depends(get_db_session),
) -> ProductEnvelope:
    product = await product_service.update_product(db, id, data)
    return ProductEnvelope(product=ProductOut.model_validate(product))


@router.delete(
    "/{id}",
    response_model=MessageResponse,
    responses={k: v for k, v in _ERRORS.items() if k != 409},
    summary="Delete a product",
)
async def delete_product(
    id: str,
    _: Dict[str, Any] = Depends(validate_request(id_rules)),
    identity: Identity = Depends(require_roles(*ADMIN_ROLES)),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await product_service.delete_product(db, id)
    return MessageResponse(message="Product deleted successfully")
