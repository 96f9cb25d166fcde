"""
services/note_service.py — Note CRUD bound to the authenticated owner.

Authorization rules:
  - A user can only read, update and delete their own notes.
  - Touching someone else's note → FORBIDDEN (403); unknown id → 404.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility — only flush here.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from notes_backend.app.errors import AppError, ErrorCode
from notes_backend.app.models.note import MAX_NOTE_ID, Note


# ── Private helpers ────────────────────────────────────────────────────────

def _get_owned_note(note_id: int, user_id: int, session: Session) -> Note:
    """Returns the Note or raises NOTE_NOT_FOUND (404) / FORBIDDEN (403)."""
    # ids the key column cannot hold are unknown, not a database error
    note = session.get(Note, note_id) if 0 < note_id <= MAX_NOTE_ID else None
    if note is None:
        raise AppError(
            ErrorCode.NOTE_NOT_FOUND,
            f"Note {note_id} does not exist.",
            404,
        )
    if note.owner_user_id != user_id:
        raise AppError(
            ErrorCode.FORBIDDEN,
            f"Note {note_id} belongs to another user.",
            403,
        )
    return note


def _build_note_dict(note: Note) -> dict:
    """Serialises a Note to a plain dict."""
    return {
        "id": note.id,
        "title": note.title,
        "content": note.content,
        "color": note.color,
        "created_at": note.created_at.isoformat(),
    }


# ── Public service functions ───────────────────────────────────────────────

def save_note(
        user_id: int,
        title: str,
        content: str,
        color: int,
        session: Session,
        note_id: int | None = None,
) -> tuple[dict, bool]:
    """
    Creates a note, or updates one of the caller's notes when note_id is given.

    Returns: (note dict, created flag)
    """
    if note_id is not None:
        note = _get_owned_note(note_id, user_id, session)
        note.title = title
        note.content = content
        note.color = color
        session.flush()
        return _build_note_dict(note), False

    note = Note(
        owner_user_id=user_id,
        title=title,
        content=content,
        color=color,
    )
    session.add(note)
    session.flush()  # populate note.id
    return _build_note_dict(note), True


def list_notes(user_id: int, session: Session) -> list[dict]:
    """All notes owned by user_id, newest first."""
    notes = session.execute(
        select(Note)
        .where(Note.owner_user_id == user_id)
        .order_by(Note.created_at.desc(), Note.id.desc())
    ).scalars().all()
    return [_build_note_dict(n) for n in notes]


def delete_note(note_id: int, user_id: int, session: Session) -> None:
    note = _get_owned_note(note_id, user_id, session)
    session.delete(note)
    session.flush()
