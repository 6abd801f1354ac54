"""
Storefront API — Shared Pydantic Schemas
=========================================

What:  The base model every API schema inherits, plus envelopes shared by all
       resources (errors, plain messages, health).
Why:   API payloads use camelCase keys (isActive, createdAt) while Python code
       uses snake_case; the alias generator bridges the two in one place.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """
    Base for response schemas.

    - from_attributes: build straight from ORM rows
    - alias_generator: snake_case fields ↔ camelCase JSON
    - populate_by_name: services can still pass snake_case keyword arguments
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class APIInputModel(APIModel):
    """Base for request bodies: trims strings and ignores undeclared keys."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
        extra="ignore",
    )


class MessageResponse(APIModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "success": false,
            "message": "Validation failed",
            "errors": {"name": "Category name is required"},
            "request_id": "a1b2c3d4"
        }
    """
    success: bool = Field(default=False)
    message: str = Field(description="Human-readable error description")
    errors: Optional[Dict[str, str]] = Field(default=None, description="Field → message map")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /api/health for monitoring and load balancer probes.
    """
    success: bool = Field(description="False when a critical dependency is down")
    message: str
    version: str
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float
