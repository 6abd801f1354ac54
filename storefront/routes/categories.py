"""
Storefront API — Category Routes
=================================

What:  The /api/categories dispatch table and its input rules.
How:   Each route lists its chain as ordered dependencies:
           validation (params, then body) → role gate → controller
       so a malformed request is rejected before identity is even looked up,
       and nothing reaches the service unless both checks pass.

Route Inventory:
    GET    /api/categories          public      ?type=product|blog
    GET    /api/categories/{id}     public
    POST   /api/categories          admin       name, type, description?, parent?
    PUT    /api/categories/{id}     admin       any of name/type/description/parent/isActive
    DELETE /api/categories/{id}     admin
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.auth import Identity, require_roles
from storefront.constants import ADMIN_ROLES, CATEGORY_TYPES
from storefront.database import get_db_session
from storefront.exceptions import ValidationError
from storefront.schemas.category import (
    CategoryEnvelope,
    CategoryListEnvelope,
    CategoryOut,
)
from storefront.schemas.common import ErrorResponse, MessageResponse
from storefront.services.category_service import category_service
from storefront.validation import RuleSet, body, param, validate_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["Categories"])


# ══════════════════════════════════════════════════════════════════════════
# Validation rules
# ══════════════════════════════════════════════════════════════════════════

id_rules = RuleSet(
    param("id").is_mongo_id(message="Invalid category ID"),
)

create_category_rules = RuleSet(
    body("name")
        .trim()
        .exists(check_falsy=True, message="Category name is required")
        .is_string(message="Category name must be a string")
        .is_length(min=2, max=100, message="Category name must be between 2 and 100 characters"),
    body("type")
        .exists(check_falsy=True, message="Type is required")
        .is_string(message="Type must be a string")
        .is_in(CATEGORY_TYPES, message="Type must be either product or blog"),
    body("description")
        .optional()
        .trim()
        .is_string(message="Description must be a string")
        .is_length(max=500, message="Description cannot exceed 500 characters"),
    body("parent")
        .optional(nullable=True)
        .to_lower()
        .is_mongo_id(message="Parent must be a valid category ID"),
)

update_category_rules = id_rules + RuleSet(
    body("name")
        .optional()
        .trim()
        .is_string(message="Category name must be a string")
        .is_length(min=2, max=100, message="Category name must be between 2 and 100 characters"),
    body("type")
        .optional()
        .is_string(message="Type must be a string")
        .is_in(CATEGORY_TYPES, message="Type must be either product or blog"),
    body("description")
        .optional(nullable=True)
        .trim()
        .is_string(message="Description must be a string")
        .is_length(max=500, message="Description cannot exceed 500 characters"),
    body("parent")
        .optional(nullable=True)
        .to_lower()
        .is_mongo_id(message="Parent must be a valid category ID"),
    body("isActive")
        .optional()
        .is_boolean(message="isActive must be a boolean value"),
)

_ERRORS = {
    400: {"description": "Validation failed", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Role not allowed", "model": ErrorResponse},
    404: {"description": "Category not found", "model": ErrorResponse},
}


# ══════════════════════════════════════════════════════════════════════════
# Routes
# ══════════════════════════════════════════════════════════════════════════

@router.get(
    "",
    response_model=CategoryListEnvelope,
    summary="List categories",
    description="Get all categories, optionally filtered by type.",
)
async def list_categories(
    type: Optional[str] = Query(default=None, description="Filter: product or blog"),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryListEnvelope:
    if type is not None and type not in CATEGORY_TYPES:
        raise ValidationError(errors={"type": "Type must be either product or blog"})
    categories = await category_service.list_categories(db, category_type=type)
    return CategoryListEnvelope(
        count=len(categories),
        categories=[CategoryOut.model_validate(c) for c in categories],
    )


@router.get(
    "/{id}",
    response_model=CategoryEnvelope,
    responses={k: v for k, v in _ERRORS.items() if k in (400, 404)},
    summary="Get a category by ID",
)
async def get_category(
    id: str,
    _: Dict[str, Any] = Depends(validate_request(id_rules)),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryEnvelope:
    category = await category_service.get_category(db, id)
    return CategoryEnvelope(category=CategoryOut.model_validate(category))


@router.post(
    "",
    status_code=201,
    response_model=CategoryEnvelope,
    responses={k: v for k, v in _ERRORS.items() if k != 404},
    summary="Create a category",
)
async def create_category(
    payload: Dict[str, Any] = Depends(validate_request(create_category_rules)),
    identity: Identity = Depends(require_roles(*ADMIN_ROLES)),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryEnvelope:
    category = await category_service.create_category(db, payload)
    return CategoryEnvelope(category=CategoryOut.model_validate(category))


@router.put(
    "/{id}",
    response_model=CategoryEnvelope,
    responses=_ERRORS,
    summary="Update a category",
    description="Partial update: fields left out of the body keep their stored value.",
)
async def update_category(
    id: str,
    payload: Dict[str, Any] = Depends(validate_request(update_category_rules)),
    identity: Identity = Depends(require_roles(*ADMIN_ROLES)),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryEnvelope:
    category = await category_service.update_category(db, id, payload)
    return CategoryEnvelope(category=CategoryOut.model_validate(category))


@router.delete(
    "/{id}",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete a category",
)
async def delete_category(
    id: str,
    _: Dict[str, Any] = Depends(validate_request(id_rules)),
    identity: Identity = Depends(require_roles(*ADMIN_ROLES)),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await category_service.delete_category(db, id)
    return MessageResponse(message="Category deleted successfully")
