"""
Storefront API — Authorization Gate Tests
==========================================

What we test:
    ✅ is_authorized allows only roles in the required set
    ✅ Missing / unknown / disabled tokens → 401
    ✅ Authenticated non-admin → 403, and nothing is written
    ✅ Malformed input is rejected (400) before identity is checked
"""

import pytest
from sqlalchemy import func, select

from storefront.auth import Identity, hash_token, is_authorized
from storefront.constants import ADMIN_ROLES
from storefront.models import Category, User


def _identity(role):
    return Identity(user_id="507f1f77bcf86cd799439011", email="a@example.com", role=role)


class TestIsAuthorized:

    @pytest.mark.parametrize("role", ["admin", "super-admin"])
    def test_admin_roles_allowed(self, role):
        assert is_authorized(_identity(role), ADMIN_ROLES)

    @pytest.mark.parametrize("role", ["user", "guest", ""])
    def test_other_roles_denied(self, role):
        assert not is_authorized(_identity(role), ADMIN_ROLES)

    def test_no_identity_denied(self):
        assert not is_authorized(None, ADMIN_ROLES)

    def test_empty_required_set_denies_everyone(self):
        assert not is_authorized(_identity("admin"), ())


def test_hash_token_is_sha256_hex():
    digest = hash_token("secret")
    assert len(digest) == 64
    assert digest == hash_token("secret")
    assert digest != hash_token("Secret")


class TestGateOverHTTP:

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, client):
        response = await client.post("/api/categories", json={"name": "Snacks", "type": "product"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_unknown_token_is_401(self, client):
        response = await client.post(
            "/api/categories",
            json={"name": "Snacks", "type": "product"},
            headers={"Authorization": "Bearer not-a-real-token"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, token failed"

    @pytest.mark.asyncio
    async def test_disabled_user_is_401(self, client, session_factory, admin_headers):
        async with session_factory() as session:
            admin = (await session.execute(select(User).where(User.role == "admin"))).scalar_one()
            admin.is_active = False
            await session.commit()

        response = await client.post(
            "/api/categories", json={"name": "Snacks", "type": "product"}, headers=admin_headers
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_admin_is_403_and_nothing_written(self, client, session_factory, user_headers):
        response = await client.post(
            "/api/categories", json={"name": "Snacks", "type": "product"}, headers=user_headers
        )
        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "message": "Access denied: insufficient permissions",
            "request_id": response.headers["X-Request-ID"],
        }

        async with session_factory() as session:
            count = (await session.execute(select(func.count(Category.id)))).scalar()
        assert count == 0

    @pytest.mark.asyncio
    async def test_validation_runs_before_auth(self, client):
        response = await client.post("/api/categories", json={"name": "S", "type": "video"})
        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"name", "type"}

    @pytest.mark.asyncio
    async def test_super_admin_passes(self, client, super_admin_headers):
        response = await client.post(
            "/api/categories", json={"name": "Snacks", "type": "product"}, headers=super_admin_headers
        )
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_reads_are_public(self, client):
        response = await client.get("/api/categories")
        assert response.status_code == 200
