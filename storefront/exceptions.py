"""
Storefront API — Custom Exception Hierarchy
============================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{success: false, message, ...}` JSON with the right status.
Who:   Raised by the validation engine, auth gate, and services.

Exception Hierarchy:
    StorefrontError (base)
    ├── ValidationError          → 400 Bad Request (field → message map)
    ├── ReferenceIntegrityError  → 400 Bad Request (unknown parent / tag)
    ├── AuthenticationError      → 401 Unauthorized
    ├── AuthorizationError       → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict (unique slug / name)
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Iterable, Optional


class StorefrontError(Exception):
    """
    Base exception for all Storefront application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """
    Raised when client input fails validation.

    HTTP:    400 Bad Request

    Example response:
        {
            "success": false,
            "message": "Validation failed",
            "errors": {"name": "Category name must be between 2 and 100 characters"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[Dict[str, str]] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.errors: Dict[str, str] = dict(errors or {})
        if field and field not in self.errors:
            self.errors[field] = message
        super().__init__(message=message, context=context)
        self.field = field


class ReferenceIntegrityError(StorefrontError):
    """
    Raised when a write references a document that does not exist.

    When:    Category.parent points at a missing category; a product tag id
             does not resolve to a Tag.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Referenced resource does not exist",
        field: Optional[str] = None,
        missing_ids: Optional[Iterable[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if missing_ids:
            ctx["missing_ids"] = sorted(missing_ids)
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(StorefrontError):
    """No usable identity on the request. HTTP 401."""

    def __init__(
        self,
        message: str = "Not authorized, no valid token provided",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(StorefrontError):
    """
    Raised by the role gate when the identity's role is not allowed.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Access denied: insufficient permissions",
        required_roles: Optional[Iterable[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if required_roles:
            ctx["required_roles"] = list(required_roles)
        super().__init__(message=message, context=ctx)


class NotFoundError(StorefrontError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts that
    into this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(StorefrontError):
    """
    Raised when a write violates a uniqueness constraint.

    When:    Two products derive the same slug, or a tag name is reused.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DatabaseError(StorefrontError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the context is
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(StorefrontError):
    """Client exceeded the per-IP request budget. HTTP 429."""

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = "Too many requests from this IP, please try again later."
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
