"""
NoteBox: Notes Route Tests
=============================

What:  End-to-end tests of the five note routes through the ASGI app.
How:   Real NoteStore over in-memory SQLite for the happy paths; a mocked
       store (mock_store fixture) to force persistence failures and to
       prove that invalid input never reaches the store.
"""

from unittest.mock import MagicMock

import pytest

from notebox.config import Settings
from notebox.exceptions import NotFoundError, PersistenceError
from notebox.main import create_app
from notebox.middleware.security_headers import SECURITY_HEADERS
from notebox.services.note_store import NoteStore


async def _add(client, title="A", description="B"):
    response = await client.post("/add", json={"title": title, "description": description})
    assert response.status_code == 200
    return response.json()["note"]


class TestAddNote:

    @pytest.mark.asyncio
    async def test_add_returns_note(self, test_client):
        response = await test_client.post("/add", json={"title": "A", "description": "B"})

        assert response.status_code == 200
        note = response.json()["note"]
        assert note["title"] == "A"
        assert note["description"] == "B"
        assert note["id"]
        assert note["createdAt"]

    @pytest.mark.asyncio
    async def test_add_blank_description_is_rejected(self, test_client):
        response = await test_client.post("/add", json={"title": "A", "description": ""})

        assert response.status_code == 400
        assert response.json() == {"message": "Description is required"}

    @pytest.mark.asyncio
    async def test_add_whitespace_title_is_rejected(self, test_client):
        response = await test_client.post("/add", json={"title": "   ", "description": "B"})

        assert response.status_code == 400
        assert response.json() == {"message": "Title is required"}

    @pytest.mark.asyncio
    async def test_add_checks_title_before_description(self, test_client):
        response = await test_client.post("/add", json={})

        assert response.status_code == 400
        assert response.json() == {"message": "Title is required"}

    @pytest.mark.asyncio
    async def test_add_without_body_is_rejected(self, test_client):
        response = await test_client.post("/add")

        assert response.status_code == 400
        assert response.json() == {"message": "Title is required"}

    @pytest.mark.asyncio
    async def test_add_non_string_title_is_invalid_body(self, test_client):
        response = await test_client.post("/add", json={"title": 5, "description": "B"})

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid request body"}

    @pytest.mark.asyncio
    async def test_add_malformed_json_is_invalid_body(self, test_client):
        response = await test_client.post(
            "/add",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid request body"}

    @pytest.mark.asyncio
    async def test_add_database_failure_is_empty_500(self, test_client, mock_store):
        mock_store.create.side_effect = PersistenceError(operation="create")

        response = await test_client.post("/add", json={"title": "A", "description": "B"})

        assert response.status_code == 500
        assert response.content == b""


class TestGetNote:

    @pytest.mark.asyncio
    async def test_get_existing_note(self, test_client):
        created = await _add(test_client, title="Find me")

        response = await test_client.post("/get", json={"id": created["id"]})

        assert response.status_code == 200
        assert response.json()["note"]["title"] == "Find me"
        assert response.json()["note"]["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_created_at_matches_across_routes(self, test_client):
        created = await _add(test_client)

        fetched = (await test_client.post("/get", json={"id": created["id"]})).json()["note"]
        listed = (await test_client.get("/all")).json()["notes"]

        assert created["createdAt"].endswith("Z")
        assert fetched["createdAt"] == created["createdAt"]
        assert listed[0]["createdAt"] == created["createdAt"]

    @pytest.mark.asyncio
    async def test_get_unknown_note_is_null(self, test_client):
        response = await test_client.post("/get", json={"id": "missing"})

        assert response.status_code == 200
        assert response.json() == {"note": None}

    @pytest.mark.asyncio
    async def test_get_blank_id_never_reaches_store(self, test_client, mock_store):
        response = await test_client.post("/get", json={"id": "  "})

        assert response.status_code == 400
        assert response.json() == {"message": "ID is required"}
        mock_store.get_by_id.assert_not_called()


class TestUpdateNote:

    @pytest.mark.asyncio
    async def test_update_existing_note(self, test_client):
        created = await _add(test_client, title="Old", description="Old body")

        response = await test_client.post(
            "/update",
            json={"id": created["id"], "title": "New", "description": "New body"},
        )

        assert response.status_code == 200
        note = response.json()["note"]
        assert note["id"] == created["id"]
        assert note["title"] == "New"
        assert note["description"] == "New body"

    @pytest.mark.asyncio
    async def test_update_ignores_created_at_in_body(self, test_client):
        created = await _add(test_client)

        await test_client.post(
            "/update",
            json={
                "id": created["id"],
                "title": "T",
                "description": "D",
                "createdAt": "1999-01-01T00:00:00Z",
            },
        )
        fetched = (await test_client.post("/get", json={"id": created["id"]})).json()["note"]

        assert not fetched["createdAt"].startswith("1999")

    @pytest.mark.asyncio
    async def test_update_unknown_id_is_500(self, test_client):
        response = await test_client.post(
            "/update",
            json={"id": "missing", "title": "T", "description": "D"},
        )

        assert response.status_code == 500
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_update_missing_id_never_reaches_store(self, test_client, mock_store):
        response = await test_client.post("/update", json={"title": "T", "description": "D"})

        assert response.status_code == 400
        assert response.json() == {"message": "ID is required"}
        mock_store.update.assert_not_called()


class TestAllNotes:

    @pytest.mark.asyncio
    async def test_all_empty(self, test_client):
        response = await test_client.get("/all")

        assert response.status_code == 200
        assert response.json() == {"notes": []}

    @pytest.mark.asyncio
    async def test_all_returns_every_note(self, test_client):
        for i in range(3):
            await _add(test_client, title=f"Note {i}")

        response = await test_client.get("/all")

        assert response.status_code == 200
        assert len(response.json()["notes"]) == 3

    @pytest.mark.asyncio
    async def test_all_database_failure_is_empty_500(self, test_client, mock_store):
        mock_store.list_all.side_effect = PersistenceError(operation="list_all")

        response = await test_client.get("/all")

        assert response.status_code == 500
        assert response.content == b""


class TestDeleteNote:

    @pytest.mark.asyncio
    async def test_delete_existing_note(self, test_client):
        created = await _add(test_client)

        response = await test_client.request("DELETE", "/delete", json={"id": created["id"]})

        assert response.status_code == 200
        assert response.content == b""
        fetched = await test_client.post("/get", json={"id": created["id"]})
        assert fetched.json() == {"note": None}

    @pytest.mark.asyncio
    async def test_delete_missing_note_is_500(self, test_client):
        response = await test_client.request("DELETE", "/delete", json={"id": "missing"})

        assert response.status_code == 500
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_delete_twice_fails_second_time(self, test_client):
        created = await _add(test_client)

        first = await test_client.request("DELETE", "/delete", json={"id": created["id"]})
        second = await test_client.request("DELETE", "/delete", json={"id": created["id"]})

        assert first.status_code == 200
        assert second.status_code == 500

    @pytest.mark.asyncio
    async def test_delete_blank_id_never_reaches_store(self, test_client, mock_store):
        response = await test_client.request("DELETE", "/delete", json={"id": ""})

        assert response.status_code == 400
        assert response.json() == {"message": "ID is required"}
        mock_store.delete.assert_not_called()


class TestErrorPolicy:

    @pytest.mark.asyncio
    async def test_not_found_can_be_surfaced_as_404(self, settings, database):
        from httpx import AsyncClient, ASGITransport

        surfaced = Settings(**{**settings.model_dump(), "surface_not_found": True}, _env_file=None)
        app = create_app(settings=surfaced, database=database)
        transport = ASGITransport(app=app)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.request("DELETE", "/delete", json={"id": "missing"})

        assert response.status_code == 404
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_not_found_from_store_is_500_by_default(self, test_client, mock_store):
        mock_store.update.side_effect = NotFoundError(resource="note", resource_id="x")

        response = await test_client.post(
            "/update",
            json={"id": "x", "title": "T", "description": "D"},
        )

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_unknown_route_is_404_text(self, test_client):
        response = await test_client.get("/nope")

        assert response.status_code == 404
        assert response.text == "Not found"

    @pytest.mark.asyncio
    async def test_wrong_method_is_404_text(self, test_client):
        response = await test_client.get("/add")

        assert response.status_code == 404
        assert response.text == "Not found"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_500_text(self, test_client, mock_store):
        mock_store.list_all.side_effect = RuntimeError("boom")

        response = await test_client.get("/all")

        assert response.status_code == 500
        assert response.text == "Server error"
        assert "boom" not in response.text

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_middleware_headers(self, test_client, mock_store):
        mock_store.list_all.side_effect = RuntimeError("boom")

        response = await test_client.get("/all", headers={"X-Request-ID": "trace-500"})

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "trace-500"
        for name, value in SECURITY_HEADERS.items():
            assert response.headers[name] == value

    @pytest.mark.asyncio
    async def test_refused_connection_is_empty_500(self, test_client, app):
        factory = MagicMock()
        factory.begin.side_effect = ConnectionRefusedError(111, "Connect call failed")
        app.state.note_store = NoteStore(factory)

        response = await test_client.get("/all")

        assert response.status_code == 500
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_routes_mount_under_prefix(self, settings, database):
        from httpx import AsyncClient, ASGITransport

        prefixed = Settings(**{**settings.model_dump(), "notes_prefix": "notes/"}, _env_file=None)
        app = create_app(settings=prefixed, database=database)
        transport = ASGITransport(app=app)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            ok = await client.get("/notes/all")
            missing = await client.get("/all")

        assert ok.status_code == 200
        assert missing.status_code == 404
