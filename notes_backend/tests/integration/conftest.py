"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - The app is created once per session using create_app("testing").
    TestingConfig points at in-memory SQLite unless TEST_DATABASE_URL names a
    real database (e.g. PostgreSQL).
  - All tables are created once via db.create_all() at session start.
  - Between tests, all rows are deleted in FK-safe order so tests are isolated.

Helper functions (not fixtures) are provided for common operations:
  - register(client, ...)    → user dict
  - login(client, ...)       → {"access_token": ..., "refresh_token": ...}
  - auth_headers(token)      → {"Authorization": "Bearer <token>"}
  - make_note(client, ...)   → HTTP response
"""

from __future__ import annotations

import pytest
from sqlalchemy import text

from notes_backend.app import create_app
from notes_backend.app.extensions import db as _db


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """Creates the Flask application in 'testing' mode once for the whole session."""
    flask_app = create_app("testing")

    with flask_app.app_context():
        _db.create_all()

    yield flask_app

    with flask_app.app_context():
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """Deletes all rows after EVERY test, children before parents."""
    yield  # run the test

    with app.app_context():
        _db.session.rollback()  # discard any uncommitted state from a failed test
        _db.session.execute(text("DELETE FROM notes"))
        _db.session.execute(text("DELETE FROM refresh_tokens"))
        _db.session.execute(text("DELETE FROM users"))
        _db.session.commit()


# ═══════════════════════════════════════════════════════════════════════════
# Client fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

DEFAULT_PASSWORD = "Password1"


def register(client, email: str = "alice@test.com", password: str = DEFAULT_PASSWORD) -> dict:
    """Registers a new user and returns the user dict."""
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password},
    )
    assert resp.status_code == 201, f"register failed: {resp.get_json()}"
    return resp.get_json()["data"]["user"]


def login(client, email: str = "alice@test.com", password: str = DEFAULT_PASSWORD) -> dict:
    """Logs in and returns {"access_token": ..., "refresh_token": ...}."""
    resp = client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password},
    )
    assert resp.status_code == 200, f"login failed: {resp.get_json()}"
    return resp.get_json()["data"]


def register_and_login(client, email: str = "alice@test.com") -> dict:
    register(client, email)
    return login(client, email)


def auth_headers(token: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {token}"}


def make_note(
    client,
    token: str,
    title: str = "Groceries",
    content: str = "milk, eggs",
    color: int = 0xFFFFE082,
    note_id: int | None = None,
):
    """Creates (or, with note_id, updates) a note. Returns the HTTP response."""
    payload: dict = {"title": title, "content": content, "color": color}
    if note_id is not None:
        payload["id"] = note_id
    return client.post("/api/v1/notes/", json=payload, headers=auth_headers(token))
