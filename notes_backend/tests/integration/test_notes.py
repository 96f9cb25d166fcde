"""
tests/integration/test_notes.py — Integration tests for the notes endpoints.

Endpoints covered:
  POST   /notes/       → 201 create, 200 update
  GET    /notes/       → 200
  DELETE /notes/<id>   → 200

Error cases:
  TOKEN_MISSING   401 — every endpoint requires a bearer token
  NOTE_NOT_FOUND  404 — unknown note id
  FORBIDDEN       403 — note owned by another user
"""

from __future__ import annotations

from .conftest import auth_headers, make_note, register_and_login


class TestCreateNote:

    def test_create_returns_201_with_note(self, client):
        tokens = register_and_login(client)
        resp = make_note(client, tokens["access_token"], title="Groceries", color=0xFF00FF00)

        assert resp.status_code == 201
        note = resp.get_json()["data"]
        assert note["title"] == "Groceries"
        assert note["content"] == "milk, eggs"
        assert note["color"] == 0xFF00FF00
        assert isinstance(note["id"], int)
        assert "created_at" in note

    def test_create_requires_auth(self, client):
        resp = client.post("/api/v1/notes/", json={"title": "x", "content": "", "color": 0})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_MISSING"

    def test_invalid_payload_returns_400(self, client):
        tokens = register_and_login(client)
        resp = client.post(
            "/api/v1/notes/",
            json={"title": "", "content": "", "color": 0},
            headers=auth_headers(tokens["access_token"]),
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "title"


class TestUpdateNote:

    def test_post_with_id_updates_existing_note(self, client):
        tokens = register_and_login(client)
        note_id = make_note(client, tokens["access_token"]).get_json()["data"]["id"]

        resp = make_note(client, tokens["access_token"], title="Renamed", note_id=note_id)

        assert resp.status_code == 200
        assert resp.get_json()["data"]["id"] == note_id
        assert resp.get_json()["data"]["title"] == "Renamed"

        listed = client.get("/api/v1/notes/", headers=auth_headers(tokens["access_token"]))
        assert [n["title"] for n in listed.get_json()["data"]] == ["Renamed"]

    def test_update_unknown_note_returns_404(self, client):
        tokens = register_and_login(client)
        resp = make_note(client, tokens["access_token"], note_id=99999)
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "NOTE_NOT_FOUND"

    def test_update_out_of_range_id_returns_400(self, client):
        tokens = register_and_login(client)
        resp = make_note(client, tokens["access_token"], note_id=99999999999999999999)
        assert resp.status_code == 400
        body = resp.get_json()["error"]
        assert body["code"] == "INVALID_FIELD"
        assert body["field"] == "id"

    def test_update_foreign_note_returns_403(self, client):
        alice = register_and_login(client, "alice@test.com")
        bob = register_and_login(client, "bob@test.com")
        note_id = make_note(client, alice["access_token"]).get_json()["data"]["id"]

        resp = make_note(client, bob["access_token"], title="Hijacked", note_id=note_id)

        assert resp.status_code == 403
        assert resp.get_json()["error"]["code"] == "FORBIDDEN"


class TestListNotes:

    def test_list_returns_only_callers_notes(self, client):
        alice = register_and_login(client, "alice@test.com")
        bob = register_and_login(client, "bob@test.com")
        make_note(client, alice["access_token"], title="alice-1")
        make_note(client, alice["access_token"], title="alice-2")
        make_note(client, bob["access_token"], title="bob-1")

        resp = client.get("/api/v1/notes/", headers=auth_headers(alice["access_token"]))

        assert resp.status_code == 200
        assert sorted(n["title"] for n in resp.get_json()["data"]) == ["alice-1", "alice-2"]

    def test_list_is_empty_for_new_user(self, client):
        tokens = register_and_login(client)
        resp = client.get("/api/v1/notes/", headers=auth_headers(tokens["access_token"]))
        assert resp.get_json()["data"] == []

    def test_list_requires_auth(self, client):
        assert client.get("/api/v1/notes/").status_code == 401


class TestDeleteNote:

    def test_delete_removes_note(self, client):
        tokens = register_and_login(client)
        headers = auth_headers(tokens["access_token"])
        note_id = make_note(client, tokens["access_token"]).get_json()["data"]["id"]

        resp = client.delete(f"/api/v1/notes/{note_id}", headers=headers)

        assert resp.status_code == 200
        assert client.get("/api/v1/notes/", headers=headers).get_json()["data"] == []

    def test_delete_unknown_note_returns_404(self, client):
        tokens = register_and_login(client)
        resp = client.delete("/api/v1/notes/99999", headers=auth_headers(tokens["access_token"]))
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "NOTE_NOT_FOUND"

    def test_delete_out_of_range_id_returns_404(self, client):
        tokens = register_and_login(client)
        resp = client.delete(
            "/api/v1/notes/99999999999999999999",
            headers=auth_headers(tokens["access_token"]),
        )
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "NOTE_NOT_FOUND"

    def test_delete_foreign_note_returns_403_and_keeps_it(self, client):
        alice = register_and_login(client, "alice@test.com")
        bob = register_and_login(client, "bob@test.com")
        note_id = make_note(client, alice["access_token"]).get_json()["data"]["id"]

        resp = client.delete(f"/api/v1/notes/{note_id}", headers=auth_headers(bob["access_token"]))

        assert resp.status_code == 403
        listed = client.get("/api/v1/notes/", headers=auth_headers(alice["access_token"]))
        assert [n["id"] for n in listed.get_json()["data"]] == [note_id]
