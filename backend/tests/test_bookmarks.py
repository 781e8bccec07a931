"""
Xync Backend — Bookmark & Tag Tests
===================================

What we test:
    ✅ Create with tags and category; list newest first; filter by category
    ✅ URL validation and required fields
    ✅ tag_ids on update replaces the set; [] clears it; omitted keeps it
    ✅ A rejected tag id writes nothing (no bookmark, no associations)
    ✅ Deleting a tag detaches it; deleting a bookmark keeps its tags
    ✅ Tag names unique per user; colors must be #RRGGBB
    ✅ A category deleted between its check and the insert is a 400, not a 500
"""

from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest
from sqlalchemy import func, select

from xync.models.bookmark import bookmark_tags


async def create_tag(client, headers, name, color=None):
    payload = {"name": name}
    if color is not None:
        payload["color"] = color
    response = await client.post("/tags", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def create_bookmark(client, headers, **fields):
    payload = {"url": "https://example.com/article", "title": "Article"}
    payload.update(fields)
    response = await client.post("/bookmarks", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def count_associations(db_session, bookmark_id=None):
    stmt = select(func.count()).select_from(bookmark_tags)
    if bookmark_id is not None:
        stmt = stmt.where(bookmark_tags.c.bookmark_id == UUID(bookmark_id))
    return (await db_session.execute(stmt)).scalar_one()


class TestBookmarkCrud:

    @pytest.mark.asyncio
    async def test_create_with_tags(self, test_client, alice):
        python = await create_tag(test_client, alice["headers"], "python")
        web = await create_tag(test_client, alice["headers"], "web")

        bookmark = await create_bookmark(
            test_client,
            alice["headers"],
            description="Worth reading",
            tag_ids=[web["id"], python["id"], web["id"]],
        )

        assert bookmark["url"] == "https://example.com/article"
        assert bookmark["description"] == "Worth reading"
        assert sorted(t["name"] for t in bookmark["tags"]) == ["python", "web"]
        assert bookmark["preview_image"] is None

    @pytest.mark.asyncio
    async def test_list_newest_first(self, test_client, alice):
        first = await create_bookmark(test_client, alice["headers"], title="First")
        second = await create_bookmark(test_client, alice["headers"], title="Second")

        response = await test_client.get("/bookmarks", headers=alice["headers"])

        assert [b["id"] for b in response.json()] == [second["id"], first["id"]]

    @pytest.mark.asyncio
    async def test_list_filtered_by_category(self, test_client, alice):
        work = (await test_client.post("/categories", json={"name": "Work"}, headers=alice["headers"])).json()
        filed = await create_bookmark(test_client, alice["headers"], category_id=work["id"])
        await create_bookmark(test_client, alice["headers"])

        response = await test_client.get(
            "/bookmarks", params={"category_id": work["id"]}, headers=alice["headers"]
        )

        assert [b["id"] for b in response.json()] == [filed["id"]]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["not a url", "ftp://example.com/file", ""])
    async def test_invalid_url_rejected(self, test_client, alice, url):
        response = await test_client.post(
            "/bookmarks", json={"url": url, "title": "x"}, headers=alice["headers"]
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, test_client, alice):
        tag = await create_tag(test_client, alice["headers"], "keep")
        bookmark = await create_bookmark(
            test_client, alice["headers"], description="Original", tag_ids=[tag["id"]]
        )

        response = await test_client.put(
            f"/bookmarks/{bookmark['id']}", json={"title": "Renamed"}, headers=alice["headers"]
        )

        body = response.json()
        assert response.status_code == 200
        assert body["title"] == "Renamed"
        assert body["description"] == "Original"
        assert [t["id"] for t in body["tags"]] == [tag["id"]]

    @pytest.mark.asyncio
    async def test_null_title_rejected(self, test_client, alice):
        bookmark = await create_bookmark(test_client, alice["headers"])

        response = await test_client.put(
            f"/bookmarks/{bookmark['id']}", json={"title": None}, headers=alice["headers"]
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_null_category_uncategorizes(self, test_client, alice):
        work = (await test_client.post("/categories", json={"name": "Work"}, headers=alice["headers"])).json()
        bookmark = await create_bookmark(test_client, alice["headers"], category_id=work["id"])

        response = await test_client.put(
            f"/bookmarks/{bookmark['id']}", json={"category_id": None}, headers=alice["headers"]
        )

        assert response.json()["category_id"] is None

    @pytest.mark.asyncio
    async def test_delete(self, test_client, alice):
        bookmark = await create_bookmark(test_client, alice["headers"])

        deleted = await test_client.delete(f"/bookmarks/{bookmark['id']}", headers=alice["headers"])
        missing = await test_client.get(f"/bookmarks/{bookmark['id']}", headers=alice["headers"])

        assert deleted.status_code == 204
        assert missing.status_code == 404


class TestBookmarkTags:

    @pytest.mark.asyncio
    async def test_tag_ids_replace_the_set(self, test_client, alice):
        a = await create_tag(test_client, alice["headers"], "a")
        b = await create_tag(test_client, alice["headers"], "b")
        bookmark = await create_bookmark(test_client, alice["headers"], tag_ids=[a["id"]])

        response = await test_client.put(
            f"/bookmarks/{bookmark['id']}", json={"tag_ids": [b["id"]]}, headers=alice["headers"]
        )

        assert [t["name"] for t in response.json()["tags"]] == ["b"]

    @pytest.mark.asyncio
    async def test_empty_tag_ids_clears(self, test_client, alice, db_session):
        a = await create_tag(test_client, alice["headers"], "a")
        bookmark = await create_bookmark(test_client, alice["headers"], tag_ids=[a["id"]])

        response = await test_client.put(
            f"/bookmarks/{bookmark['id']}", json={"tag_ids": []}, headers=alice["headers"]
        )

        assert response.json()["tags"] == []
        assert await count_associations(db_session, bookmark["id"]) == 0

    @pytest.mark.asyncio
    async def test_unknown_tag_writes_nothing(self, test_client, alice, db_session):
        real = await create_tag(test_client, alice["headers"], "real")

        response = await test_client.post(
            "/bookmarks",
            json={
                "url": "https://example.com",
                "title": "x",
                "tag_ids": [real["id"], str(uuid4())],
            },
            headers=alice["headers"],
        )

        assert response.status_code == 400
        listing = await test_client.get("/bookmarks", headers=alice["headers"])
        assert listing.json() == []
        assert await count_associations(db_session) == 0

    @pytest.mark.asyncio
    async def test_unknown_tag_on_update_keeps_old_tags(self, test_client, alice):
        a = await create_tag(test_client, alice["headers"], "a")
        bookmark = await create_bookmark(test_client, alice["headers"], tag_ids=[a["id"]])

        response = await test_client.put(
            f"/bookmarks/{bookmark['id']}",
            json={"tag_ids": [str(uuid4())], "title": "Changed"},
            headers=alice["headers"],
        )

        assert response.status_code == 400
        after = (await test_client.get(f"/bookmarks/{bookmark['id']}", headers=alice["headers"])).json()
        assert after["title"] == "Article"
        assert [t["id"] for t in after["tags"]] == [a["id"]]

    @pytest.mark.asyncio
    async def test_deleting_tag_detaches_it(self, test_client, alice, db_session):
        tag = await create_tag(test_client, alice["headers"], "x")
        bookmark = await create_bookmark(test_client, alice["headers"], tag_ids=[tag["id"]])

        deleted = await test_client.delete(f"/tags/{tag['id']}", headers=alice["headers"])
        assert deleted.status_code == 204

        after = await test_client.get(f"/bookmarks/{bookmark['id']}", headers=alice["headers"])
        assert after.status_code == 200
        assert after.json()["tags"] == []
        assert await count_associations(db_session) == 0

    @pytest.mark.asyncio
    async def test_deleting_bookmark_keeps_tag(self, test_client, alice, db_session):
        tag = await create_tag(test_client, alice["headers"], "x")
        bookmark = await create_bookmark(test_client, alice["headers"], tag_ids=[tag["id"]])

        await test_client.delete(f"/bookmarks/{bookmark['id']}", headers=alice["headers"])

        still = await test_client.get(f"/tags/{tag['id']}", headers=alice["headers"])
        assert still.status_code == 200
        assert await count_associations(db_session) == 0


class TestVanishedReferences:

    @pytest.mark.asyncio
    async def test_category_deleted_mid_request_is_bad_request(
        self, test_client, alice, monkeypatch
    ):
        # The ownership check passes, then the row is gone by flush time
        monkeypatch.setattr(
            "xync.services.bookmark_service.require_owned_category",
            AsyncMock(return_value=None),
        )

        response = await test_client.post(
            "/bookmarks",
            json={"url": "https://example.com", "title": "x", "category_id": str(uuid4())},
            headers=alice["headers"],
        )

        assert response.status_code == 400
        assert response.json()["message"] == "A referenced item no longer exists"
        listing = await test_client.get("/bookmarks", headers=alice["headers"])
        assert listing.json() == []


class TestTags:

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts_per_user(self, test_client, alice, bob):
        await create_tag(test_client, alice["headers"], "python")

        same_user = await test_client.post("/tags", json={"name": "python"}, headers=alice["headers"])
        other_user = await test_client.post("/tags", json={"name": "python"}, headers=bob["headers"])

        assert same_user.status_code == 409
        assert other_user.status_code == 201

    @pytest.mark.asyncio
    async def test_color_validated(self, test_client, alice):
        good = await test_client.post("/tags", json={"name": "a", "color": "#1a2B3c"}, headers=alice["headers"])
        bad = await test_client.post("/tags", json={"name": "b", "color": "red"}, headers=alice["headers"])

        assert good.status_code == 201
        assert good.json()["color"] == "#1a2B3c"
        assert bad.status_code == 422

    @pytest.mark.asyncio
    async def test_rename(self, test_client, alice):
        tag = await create_tag(test_client, alice["headers"], "old")

        response = await test_client.put(f"/tags/{tag['id']}", json={"name": "new"}, headers=alice["headers"])

        assert response.status_code == 200
        assert response.json()["name"] == "new"

    @pytest.mark.asyncio
    async def test_list_sorted_by_name(self, test_client, alice):
        for name in ("web", "api", "python"):
            await create_tag(test_client, alice["headers"], name)

        response = await test_client.get("/tags", headers=alice["headers"])

        assert [t["name"] for t in response.json()] == ["api", "python", "web"]
