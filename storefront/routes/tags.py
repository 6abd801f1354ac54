"""
Storefront API — Tag Routes
============================

    GET    /api/tags          public
    GET    /api/tags/{id}     public
    POST   /api/tags          admin     name
    DELETE /api/tags/{id}     admin
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.auth import Identity, require_roles
from storefront.constants import ADMIN_ROLES
from storefront.database import get_db_session
from storefront.schemas.common import MessageResponse
from storefront.schemas.tag import TagEnvelope, TagListEnvelope, TagOut
from storefront.services.tag_service import tag_service
from storefront.slugs import slugify
from storefront.validation import RuleSet, body, param, validate_request

router = APIRouter(prefix="/api/tags", tags=["Tags"])

id_rules = RuleSet(
    param("id").is_mongo_id(message="Invalid tag ID"),
)

create_tag_rules = RuleSet(
    body("name")
        .trim()
        .exists(check_falsy=True, message="Tag name is required")
        .is_string(message="Tag name must be a string")
        .is_length(min=2, max=50, message="Tag name must be between 2 and 50 characters")
        .custom(lambda v: bool(slugify(v)), message="Tag name must contain letters or digits"),
)


@router.get("", response_model=TagListEnvelope, summary="List tags")
async def list_tags(db: AsyncSession = Depends(get_db_session)) -> TagListEnvelope:
    tags = await tag_service.list_tags(db)
    return TagListEnvelope(count=len(tags), tags=[TagOut.model_validate(t) for t in tags])


@router.get("/{id}", response_model=TagEnvelope, summary="Get a tag by ID")
async def get_tag(
    id: str,
    _: Dict[str, Any] = Depends(validate_request(id_rules)),
    db: AsyncSession = Depends(get_db_session),
) -> TagEnvelope:
    tag = await tag_service.get_tag(db, id)
    return TagEnvelope(tag=TagOut.model_validate(tag))


@router.post("", status_code=201, response_model=TagEnvelope, summary="Create a tag")
async def create_tag(
    payload: Dict[str, Any] = Depends(validate_request(create_tag_rules)),
    identity: Identity = Depends(require_roles(*ADMIN_ROLES)),
    db: AsyncSession = Depends(get_db_session),
) -> TagEnvelope:
    tag = await tag_service.create_tag(db, payload["name"])
    return TagEnvelope(tag=TagOut.model_validate(tag))


@router.delete("/{id}", response_model=MessageResponse, summary="Delete a tag")
async def delete_tag(
    id: str,
    _: Dict[str, Any] = Depends(validate_request(id_rules)),
    identity: Identity = Depends(require_roles(*ADMIN_ROLES)),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await tag_service.delete_tag(db, id)
    return MessageResponse(message="Tag deleted successfully")
