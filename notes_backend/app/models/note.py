"""
models/note.py — Note table definition.

No business logic. Ownership checks live in services/note_service.py.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notes_backend.app.extensions import db

# Largest value the Integer primary key holds on every supported backend
# (PostgreSQL int4).
MAX_NOTE_ID = 2**31 - 1


class Note(db.Model):
    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(primary_key=True)

    owner_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # ARGB colour as sent by the client, e.g. 0xFFFFE082.
    color: Mapped[int] = mapped_column(BigInteger, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    owner: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="notes",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Note id={self.id} owner_user_id={self.owner_user_id}>"
