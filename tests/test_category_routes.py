"""
Storefront API — Category Route Tests
======================================

What we test:
    ✅ Create defaults isActive to true and returns 201
    ✅ Field rules: name length, type enum, description cap, parent id shape
    ✅ Names and descriptions are trimmed before their rules run
    ✅ Ids are matched case-insensitively (path ids and parent)
    ✅ Parent must exist; cycles are refused on update
    ✅ Partial update keeps untouched fields
    ✅ Listing filter by type
    ✅ Delete detaches children; missing ids → 404, malformed ids → 400
"""

import pytest

MISSING_ID = "507f1f77bcf86cd799439011"


async def _create(client, headers, **body):
    body.setdefault("type", "product")
    response = await client.post("/api/categories", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["category"]


class TestCreateCategory:

    @pytest.mark.asyncio
    async def test_create_defaults_active(self, client, admin_headers):
        response = await client.post(
            "/api/categories",
            json={"name": "Snacks", "type": "product"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        category = body["category"]
        assert category["name"] == "Snacks"
        assert category["isActive"] is True
        assert category["parent"] is None
        assert len(category["id"]) == 24

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["S", "x" * 101])
    async def test_name_length(self, client, admin_headers, name):
        response = await client.post(
            "/api/categories", json={"name": name, "type": "product"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["errors"]["name"] == "Category name must be between 2 and 100 characters"

    @pytest.mark.asyncio
    async def test_blank_name_is_missing(self, client, admin_headers):
        response = await client.post(
            "/api/categories", json={"name": "    ", "type": "product"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["errors"]["name"] == "Category name is required"

    @pytest.mark.asyncio
    async def test_name_length_counts_trimmed_text(self, client, admin_headers):
        response = await client.post(
            "/api/categories", json={"name": " a ", "type": "product"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["errors"]["name"] == "Category name must be between 2 and 100 characters"

        response = await client.get("/api/categories")
        assert response.json()["count"] == 0

    @pytest.mark.asyncio
    async def test_padded_name_and_description_stored_trimmed(self, client, admin_headers):
        category = await _create(client, admin_headers, name="  Snacks  ", description=" Crunchy\n")
        assert category["name"] == "Snacks"
        assert category["description"] == "Crunchy"

    @pytest.mark.asyncio
    async def test_missing_fields(self, client, admin_headers):
        response = await client.post("/api/categories", json={}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["errors"] == {
            "name": "Category name is required",
            "type": "Type is required",
        }

    @pytest.mark.asyncio
    async def test_type_enum(self, client, admin_headers):
        response = await client.post(
            "/api/categories", json={"name": "Videos", "type": "video"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["errors"]["type"] == "Type must be either product or blog"

    @pytest.mark.asyncio
    async def test_description_cap(self, client, admin_headers):
        response = await client.post(
            "/api/categories",
            json={"name": "Snacks", "type": "product", "description": "d" * 501},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["errors"]["description"] == "Description cannot exceed 500 characters"

    @pytest.mark.asyncio
    async def test_parent_must_be_id(self, client, admin_headers):
        response = await client.post(
            "/api/categories",
            json={"name": "Chips", "type": "product", "parent": "abc"},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["errors"]["parent"] == "Parent must be a valid category ID"

    @pytest.mark.asyncio
    async def test_parent_must_exist(self, client, admin_headers):
        response = await client.post(
            "/api/categories",
            json={"name": "Chips", "type": "product", "parent": MISSING_ID},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Parent category not found"

    @pytest.mark.asyncio
    async def test_child_with_parent(self, client, admin_headers):
        parent = await _create(client, admin_headers, name="Snacks")
        child = await _create(client, admin_headers, name="Chips", parent=parent["id"])
        assert child["parent"] == parent["id"]

    @pytest.mark.asyncio
    async def test_parent_id_case_insensitive(self, client, admin_headers):
        parent = await _create(client, admin_headers, name="Snacks")
        child = await _create(client, admin_headers, name="Chips", parent=parent["id"].upper())
        assert child["parent"] == parent["id"]

    @pytest.mark.asyncio
    async def test_undeclared_fields_ignored(self, client, admin_headers):
        category = await _create(client, admin_headers, name="Snacks", isActive=False, id="x")
        assert category["isActive"] is True
        assert category["id"] != "x"

    @pytest.mark.asyncio
    async def test_non_object_body(self, client, admin_headers):
        response = await client.post("/api/categories", json=["Snacks"], headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Request body must be a JSON object"


class TestReadCategories:

    @pytest.mark.asyncio
    async def test_list_and_filter(self, client, admin_headers):
        await _create(client, admin_headers, name="Snacks")
        await _create(client, admin_headers, name="Recipes", type="blog")

        response = await client.get("/api/categories")
        assert response.json()["count"] == 2

        response = await client.get("/api/categories", params={"type": "blog"})
        body = response.json()
        assert body["count"] == 1
        assert body["categories"][0]["name"] == "Recipes"

    @pytest.mark.asyncio
    async def test_list_bad_type(self, client):
        response = await client.get("/api/categories", params={"type": "video"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_one(self, client, admin_headers):
        created = await _create(client, admin_headers, name="Snacks")
        response = await client.get(f"/api/categories/{created['id']}")
        assert response.status_code == 200
        fetched = response.json()["category"]
        assert fetched["id"] == created["id"]
        assert fetched["name"] == "Snacks"

    @pytest.mark.asyncio
    async def test_get_with_uppercase_id(self, client, admin_headers):
        created = await _create(client, admin_headers, name="Snacks")
        response = await client.get(f"/api/categories/{created['id'].upper()}")
        assert response.status_code == 200
        assert response.json()["category"]["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_get_malformed_id(self, client):
        response = await client.get("/api/categories/123")
        assert response.status_code == 400
        assert response.json()["errors"] == {"id": "Invalid category ID"}

    @pytest.mark.asyncio
    async def test_get_missing(self, client):
        response = await client.get(f"/api/categories/{MISSING_ID}")
        assert response.status_code == 404
        assert response.json()["message"] == "Category not found"


class TestUpdateCategory:

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, client, admin_headers):
        created = await _create(client, admin_headers, name="Snacks", description="Crunchy things")

        response = await client.put(
            f"/api/categories/{created['id']}",
            json={"isActive": False},
            headers=admin_headers,
        )
        assert response.status_code == 200
        updated = response.json()["category"]
        assert updated["isActive"] is False
        assert updated["name"] == "Snacks"
        assert updated["description"] == "Crunchy things"
        assert updated["type"] == "product"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["   ", " a "])
    async def test_update_rejects_short_trimmed_name(self, client, admin_headers, name):
        created = await _create(client, admin_headers, name="Snacks")
        response = await client.put(
            f"/api/categories/{created['id']}", json={"name": name}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["errors"]["name"] == "Category name must be between 2 and 100 characters"

        response = await client.get(f"/api/categories/{created['id']}")
        assert response.json()["category"]["name"] == "Snacks"

    @pytest.mark.asyncio
    async def test_update_trims_name(self, client, admin_headers):
        created = await _create(client, admin_headers, name="Snacks")
        response = await client.put(
            f"/api/categories/{created['id']}", json={"name": "  Treats "}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["category"]["name"] == "Treats"

    @pytest.mark.asyncio
    async def test_is_active_must_be_boolean(self, client, admin_headers):
        created = await _create(client, admin_headers, name="Snacks")
        response = await client.put(
            f"/api/categories/{created['id']}", json={"isActive": "no"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["errors"]["isActive"] == "isActive must be a boolean value"

    @pytest.mark.asyncio
    async def test_clear_parent(self, client, admin_headers):
        parent = await _create(client, admin_headers, name="Snacks")
        child = await _create(client, admin_headers, name="Chips", parent=parent["id"])

        response = await client.put(
            f"/api/categories/{child['id']}", json={"parent": None}, headers=admin_headers
        )
        assert response.json()["category"]["parent"] is None

    @pytest.mark.asyncio
    async def test_self_parent_refused(self, client, admin_headers):
        category = await _create(client, admin_headers, name="Snacks")
        response = await client.put(
            f"/api/categories/{category['id']}",
            json={"parent": category["id"]},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert "parent" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_descendant_parent_refused(self, client, admin_headers):
        root = await _create(client, admin_headers, name="Snacks")
        child = await _create(client, admin_headers, name="Chips", parent=root["id"])
        grandchild = await _create(client, admin_headers, name="Salted", parent=child["id"])

        response = await client.put(
            f"/api/categories/{root['id']}",
            json={"parent": grandchild["id"]},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["errors"]["parent"] == (
            "A category cannot be moved under one of its descendants"
        )

    @pytest.mark.asyncio
    async def test_update_missing(self, client, admin_headers):
        response = await client.put(
            f"/api/categories/{MISSING_ID}", json={"name": "Snacks"}, headers=admin_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_requires_admin(self, client, admin_headers, user_headers):
        created = await _create(client, admin_headers, name="Snacks")
        response = await client.put(
            f"/api/categories/{created['id']}", json={"name": "Treats"}, headers=user_headers
        )
        assert response.status_code == 403

        response = await client.get(f"/api/categories/{created['id']}")
        assert response.json()["category"]["name"] == "Snacks"


class TestDeleteCategory:

    @pytest.mark.asyncio
    async def test_delete(self, client, admin_headers):
        created = await _create(client, admin_headers, name="Snacks")
        response = await client.delete(f"/api/categories/{created['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Category deleted successfully"}

        response = await client.get(f"/api/categories/{created['id']}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_detaches_children(self, client, admin_headers):
        parent = await _create(client, admin_headers, name="Snacks")
        child = await _create(client, admin_headers, name="Chips", parent=parent["id"])

        await client.delete(f"/api/categories/{parent['id']}", headers=admin_headers)

        response = await client.get(f"/api/categories/{child['id']}")
        assert response.status_code == 200
        assert response.json()["category"]["parent"] is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, client, admin_headers):
        response = await client.delete(f"/api/categories/{MISSING_ID}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["success"] is False
