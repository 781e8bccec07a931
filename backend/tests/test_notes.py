"""
Xync Backend — Note Service Tests
=================================

What we test:
    ✅ create_note() adds the row and commits the unit of work (mocked session)
    ✅ NoteCreate / NoteUpdate validation
    ✅ CRUD through the API, most recently edited first
    ✅ An empty update leaves updated_at untouched
"""

import uuid

import pytest
from pydantic import ValidationError

from xync.models.note import Note
from xync.schemas.note import NoteCreate, NoteUpdate
from xync.services.note_service import note_service


class TestNoteServiceUnit:

    @pytest.mark.asyncio
    async def test_create_adds_and_commits(self, mock_db_session):
        owner = uuid.uuid4()

        note = await note_service.create_note(
            mock_db_session, owner, NoteCreate(title="Groceries", content="milk")
        )

        assert isinstance(note, Note)
        assert note.user_id == owner
        assert note.title == "Groceries"
        mock_db_session.add.assert_called_once_with(note)
        mock_db_session.flush.assert_awaited_once()
        mock_db_session.commit.assert_awaited_once()
        mock_db_session.rollback.assert_not_awaited()


class TestNoteSchemas:

    def test_content_defaults_to_empty(self):
        assert NoteCreate(title="t").content == ""

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            NoteCreate(title="")

    def test_explicit_null_title_rejected_on_update(self):
        with pytest.raises(ValidationError):
            NoteUpdate.model_validate({"title": None})

    def test_omitted_fields_are_unset(self):
        update = NoteUpdate.model_validate({"content": "new"})
        assert update.model_dump(exclude_unset=True) == {"content": "new"}


class TestNotesApi:

    @pytest.mark.asyncio
    async def test_create_and_get(self, test_client, alice):
        created = await test_client.post(
            "/notes", json={"title": "Ideas", "content": "ship it"}, headers=alice["headers"]
        )
        assert created.status_code == 201

        fetched = await test_client.get(f"/notes/{created.json()['id']}", headers=alice["headers"])

        assert fetched.status_code == 200
        assert fetched.json()["title"] == "Ideas"
        assert fetched.json()["content"] == "ship it"

    @pytest.mark.asyncio
    async def test_list_most_recently_edited_first(self, test_client, alice):
        older = (await test_client.post("/notes", json={"title": "older"}, headers=alice["headers"])).json()
        newer = (await test_client.post("/notes", json={"title": "newer"}, headers=alice["headers"])).json()

        before = await test_client.get("/notes", headers=alice["headers"])
        assert [n["id"] for n in before.json()] == [newer["id"], older["id"]]

        await test_client.put(f"/notes/{older['id']}", json={"content": "edited"}, headers=alice["headers"])

        after = await test_client.get("/notes", headers=alice["headers"])
        assert [n["id"] for n in after.json()] == [older["id"], newer["id"]]

    @pytest.mark.asyncio
    async def test_empty_update_keeps_timestamp(self, test_client, alice):
        note = (await test_client.post("/notes", json={"title": "same"}, headers=alice["headers"])).json()
        original = (await test_client.get(f"/notes/{note['id']}", headers=alice["headers"])).json()

        response = await test_client.put(f"/notes/{note['id']}", json={}, headers=alice["headers"])

        assert response.status_code == 200
        assert response.json()["updated_at"] == original["updated_at"]

    @pytest.mark.asyncio
    async def test_delete(self, test_client, alice):
        note = (await test_client.post("/notes", json={"title": "gone"}, headers=alice["headers"])).json()

        deleted = await test_client.delete(f"/notes/{note['id']}", headers=alice["headers"])
        again = await test_client.delete(f"/notes/{note['id']}", headers=alice["headers"])

        assert deleted.status_code == 204
        assert again.status_code == 404
