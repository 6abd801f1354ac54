"""
Storefront API — Category Schemas
==================================

Request bodies for categories are checked by the rule sets in
storefront.routes.categories; these models only shape the responses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from storefront.schemas.common import APIModel


class CategoryOut(APIModel):
    id: str
    name: str
    type: str
    description: Optional[str] = None
    parent_id: Optional[str] = Field(default=None, alias="parent")
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CategoryEnvelope(APIModel):
    success: bool = True
    category: CategoryOut


class CategoryListEnvelope(APIModel):
    success: bool = True
    count: int
    categories: List[CategoryOut]
