"""
Storefront API — Authentication & Role Gate
============================================

What:  Resolves the caller's identity from a bearer token and gates mutating
       routes on the caller's role.
How:   `get_current_identity` hashes the bearer token (SHA-256) and loads the
       matching active User. `require_roles(...)` wraps it in a dependency
       that lets the request through only when `is_authorized` says so.
Who:   Every POST/PUT/DELETE route in storefront.routes.

The decision is made per request from the database row; nothing is cached
between requests.

Usage:
    @router.post("/", dependencies=[Depends(require_roles(*ADMIN_ROLES))])
"""

import hashlib
import logging
from typing import Callable, Iterable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db_session
from storefront.exceptions import AuthenticationError, AuthorizationError
from storefront.models.user import User

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must become our 401 body, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


class Identity(BaseModel):
    """The authenticated caller, as seen by route handlers."""
    user_id: str
    email: str
    role: str


def hash_token(token: str) -> str:
    """Digest stored in users.token_hash for a raw bearer token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def is_authorized(identity: Optional[Identity], required_roles: Iterable[str]) -> bool:
    """Pure role check: allowed only when the identity's role is in the set."""
    if identity is None:
        return False
    return identity.role in set(required_roles)


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Identity:
    """
    Resolve the bearer token to an Identity.

    Raises:
        AuthenticationError: header missing, token unknown, or user disabled (→ 401)
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    result = await db.execute(
        select(User).where(User.token_hash == hash_token(credentials.credentials))
    )
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        client_ip = request.client.host if request.client else "unknown"
        logger.warning("Rejected bearer token from %s", client_ip)
        raise AuthenticationError(message="Not authorized, token failed")

    identity = Identity(user_id=user.id, email=user.email, role=user.role)
    request.state.identity = identity
    return identity


def require_roles(*roles: str) -> Callable:
    """
    Build a dependency that admits only identities whose role is in `roles`.

    Raises:
        AuthorizationError: authenticated but role not allowed (→ 403)
    """
    required = tuple(roles)

    async def gate(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not is_authorized(identity, required):
            logger.warning(
                "Role gate denied user %s (role=%s, required=%s)",
                identity.user_id,
                identity.role,
                ", ".join(required),
            )
            raise AuthorizationError(required_roles=required)
        return identity

    return gate
