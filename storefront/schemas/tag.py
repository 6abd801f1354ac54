from datetime import datetime
from typing import List

from storefront.schemas.common import APIModel


class TagOut(APIModel):
    id: str
    name: str
    slug: str
    created_at: datetime


class TagEnvelope(APIModel):
    success: bool = True
    tag: TagOut


class TagListEnvelope(APIModel):
    success: bool = True
    count: int
    tags: List[TagOut]
