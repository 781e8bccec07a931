"""
Xync Backend — Tenant Isolation Tests
=====================================

What we test:
    ✅ Another user's bookmark / note / tag / category is 404 on GET, PUT, DELETE
    ✅ The 404 for a foreign row is byte-identical to the 404 for a missing row
    ✅ Failed cross-user writes leave the owner's data untouched
    ✅ Lists only ever contain the caller's rows
"""

from uuid import uuid4

import pytest

RESOURCES = {
    "bookmarks": ({"url": "https://example.com", "title": "Example"}, {"title": "Stolen"}),
    "notes": ({"title": "Diary", "content": "private"}, {"title": "Stolen"}),
    "tags": ({"name": "secret"}, {"name": "stolen"}),
    "categories": ({"name": "Work"}, {"name": "Stolen"}),
}


class TestCrossUserAccess:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("resource", sorted(RESOURCES))
    async def test_foreign_row_is_not_found(self, test_client, alice, bob, resource):
        payload, update = RESOURCES[resource]
        created = await test_client.post(f"/{resource}", json=payload, headers=alice["headers"])
        assert created.status_code == 201
        item_id = created.json()["id"]

        got = await test_client.get(f"/{resource}/{item_id}", headers=bob["headers"])
        put = await test_client.put(f"/{resource}/{item_id}", json=update, headers=bob["headers"])
        deleted = await test_client.delete(f"/{resource}/{item_id}", headers=bob["headers"])

        assert got.status_code == put.status_code == deleted.status_code == 404

        still_there = await test_client.get(f"/{resource}/{item_id}", headers=alice["headers"])
        assert still_there.status_code == 200
        assert still_there.json()["id"] == item_id
        assert "Stolen" not in still_there.text and "stolen" not in still_there.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("resource", sorted(RESOURCES))
    async def test_foreign_and_missing_look_the_same(self, test_client, alice, bob, resource):
        payload, _ = RESOURCES[resource]
        created = await test_client.post(f"/{resource}", json=payload, headers=alice["headers"])
        item_id = created.json()["id"]

        foreign = await test_client.get(f"/{resource}/{item_id}", headers=bob["headers"])
        missing = await test_client.get(f"/{resource}/{uuid4()}", headers=bob["headers"])

        assert foreign.status_code == missing.status_code == 404
        assert foreign.json()["message"] == missing.json()["message"]
        assert item_id not in foreign.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("resource", sorted(RESOURCES))
    async def test_lists_are_scoped_to_caller(self, test_client, alice, bob, resource):
        payload, _ = RESOURCES[resource]
        await test_client.post(f"/{resource}", json=payload, headers=alice["headers"])

        alice_list = await test_client.get(f"/{resource}", headers=alice["headers"])
        bob_list = await test_client.get(f"/{resource}", headers=bob["headers"])

        assert len(alice_list.json()) == 1
        assert bob_list.json() == []

    @pytest.mark.asyncio
    async def test_foreign_tag_cannot_be_attached(self, test_client, alice, bob):
        tag = await test_client.post("/tags", json={"name": "mine"}, headers=alice["headers"])

        response = await test_client.post(
            "/bookmarks",
            json={"url": "https://example.com", "title": "x", "tag_ids": [tag.json()["id"]]},
            headers=bob["headers"],
        )

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "tag_ids"}

    @pytest.mark.asyncio
    async def test_foreign_category_cannot_be_used(self, test_client, alice, bob):
        category = await test_client.post("/categories", json={"name": "Work"}, headers=alice["headers"])
        category_id = category.json()["id"]

        foreign = await test_client.post(
            "/bookmarks",
            json={"url": "https://example.com", "title": "x", "category_id": category_id},
            headers=bob["headers"],
        )
        missing = await test_client.post(
            "/bookmarks",
            json={"url": "https://example.com", "title": "x", "category_id": str(uuid4())},
            headers=bob["headers"],
        )

        assert foreign.status_code == missing.status_code == 400
        assert foreign.json()["message"] == missing.json()["message"]
