"""
Storefront API — Rate Limiting Middleware
==========================================

What:  Per-IP sliding window limiter over every path under RATE_LIMIT_PREFIX
       (default `/api/`), 100 requests per 15 minutes by default.
How:   Each IP keeps a list of request timestamps. On every request the
       timestamps older than the window are dropped; if the remainder has
       reached the limit the request is answered with 429 and Retry-After.

Algorithm: Sliding Window Log
    Fixed windows let a client burst twice the limit across a boundary; the
    sliding log always counts the last `rate_limit_window` seconds.

Limits:
    State is in process memory, so the limit applies per worker. Multi-worker
    deployments need a shared store (e.g. Redis) behind the same interface.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from storefront.config import settings
from storefront.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Only paths starting with `settings.rate_limit_prefix` are counted; the
    health probe and the docs are never limited.
    """

    EXCLUDED_PATHS = {"/api/health", "/docs", "/openapi.json", "/redoc"}
    # Sweep idle IPs after this many recorded requests
    CLEANUP_EVERY = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    def is_limited_path(self, path: str) -> bool:
        if path in self.EXCLUDED_PATHS:
            return False
        return path.startswith(settings.rate_limit_prefix)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.is_limited_path(request.url.path):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - settings.rate_limit_window

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= settings.rate_limit_requests:
            retry_after = int(timestamps[0] + settings.rate_limit_window - now) + 1
            exc = RateLimitExceededError(retry_after=retry_after)
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(timestamps),
                settings.rate_limit_window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "message": exc.message,
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)
        self._recorded += 1
        if self._recorded % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]
        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
