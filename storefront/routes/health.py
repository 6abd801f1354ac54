"""
Storefront API — Health Check Route
====================================

What:  Liveness/readiness probe for load balancers and Docker health checks.
How:   Runs SELECT 1 against the engine. The service is only healthy if the
       database answers; a failed probe returns 503 so traffic is routed away.
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront import __version__
from storefront import database
from storefront.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health"])

# Set once at import; uptime is measured from here
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check():
    db_status = "connected"
    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", str(e))

    healthy = db_status == "connected"
    body = HealthResponse(
        success=healthy,
        message="API is healthy." if healthy else "Database is unreachable.",
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not healthy:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
