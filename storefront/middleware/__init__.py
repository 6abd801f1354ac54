"""
Storefront API — Middleware Package
====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit first: abusive clients are turned away before any work
    2. Request ID: correlation id for logs, error bodies and X-Request-ID
    3. Logging: one access line per request, tagged with the request id

    Responses travel back through the same chain in reverse, so the request
    id header is attached and the logged duration covers the whole handler.
"""
