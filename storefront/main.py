"""
Storefront API — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers and
       returns the app; `app` at module level is what uvicorn imports
       (uvicorn storefront.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Rate Limit → Request ID → Logging → GZip   │
    │               → CORS                                     │
    │                                                          │
    │  Routers:     /api/categories  /api/products  /api/tags  │
    │               /api/health                                │
    │                                                          │
    │  Error envelope (every handler below):                   │
    │     {"success": false, "message": ..., "errors"?: {...}, │
    │      "request_id": ...}                                  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront import __version__
from storefront.config import settings
from storefront.database import dispose_engine
from storefront.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    RateLimitExceededError,
    ReferenceIntegrityError,
    StorefrontError,
    ValidationError,
)
from storefront.middleware.logging import RequestLoggingMiddleware
from storefront.middleware.rate_limit import RateLimitMiddleware
from storefront.middleware.request_id import RequestIDMiddleware, request_id_var
from storefront.routes import categories, health, products, tags
from storefront.validation import errors_from_pydantic

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, to stdout.

    Format: 2024-01-15T12:00:00 [INFO] storefront.access: GET /api/products 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # storefront.access already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("Storefront API %s starting (environment=%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so the health probe can report the problem
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Storefront API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    message: str,
    errors: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the `{success: false, ...}` body every error shares."""
    content: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    rid = request_id_var.get("")
    if rid:
        content["request_id"] = rid
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Handler table:
        ValidationError          → 400  message + errors map
        ReferenceIntegrityError  → 400  message (+ errors when the field is known)
        RequestValidationError   → 400  FastAPI's own query/path parsing failures
        AuthenticationError      → 401
        AuthorizationError       → 403
        NotFoundError            → 404
        HTTPException 404        → 404  "Resource not found" (unknown route)
        ConflictError            → 409
        RateLimitExceededError   → 429  with Retry-After
        DatabaseError            → 500  generic message, context logged
        StorefrontError (base)   → 500
        Exception                → 500  stack trace logged, never returned
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("Validation error on %s %s: %s", request.method, request.url.path, exc.errors)
        return error_response(400, exc.message, errors=exc.errors)

    @app.exception_handler(ReferenceIntegrityError)
    async def handle_reference_error(request: Request, exc: ReferenceIntegrityError):
        logger.info("Reference error: %s | %s", exc.message, exc.context)
        errors = {exc.field: exc.message} if exc.field else None
        return error_response(400, exc.message, errors=errors)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = errors_from_pydantic(exc)
        return error_response(400, "Validation failed", errors=errors)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return error_response(401, exc.message)

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(request: Request, exc: AuthorizationError):
        return error_response(403, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(404, "Resource not found")
        return error_response(exc.status_code, str(exc.detail), headers=exc.headers)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        errors = {exc.field: exc.message} if exc.field else None
        return error_response(409, exc.message, errors=errors)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return error_response(429, exc.message, headers={"Retry-After": str(exc.retry_after)})

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return error_response(500, "An internal error occurred. Please try again later.")

    @app.exception_handler(StorefrontError)
    async def handle_storefront_error(request: Request, exc: StorefrontError):
        logger.error("Unhandled application error: %s | Context: %s", exc.message, exc.context)
        return error_response(500, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return error_response(500, "Server Error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront API",
        description=(
            "Catalog API for a storefront and its admin panel: categories, "
            "products and tags, with admin-only writes."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(categories.router)
    app.include_router(products.router)
    app.include_router(tags.router)
    app.include_router(health.router)

    return app


app = create_app()
