"""
models/refresh_token.py — RefreshToken table definition.

One row per outstanding, unconsumed refresh token. No business logic.

Lifecycle:
  issued  → consumed (row deleted by rotation or logout)
  issued  → expired  (expires_at <= now; treated as absent and deleted on
                      the next lookup; there is no native TTL in SQL)
Both transitions are terminal. There is no "revoked" flag: absence IS
revocation.

FK policy: user_id ON DELETE CASCADE — tokens die with their owner.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notes_backend.app.extensions import db


class RefreshToken(db.Model):
    __tablename__ = "refresh_tokens"

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # base64(SHA-256(raw token)), 44 characters. The raw token is never stored.
    # UNIQUE: at most one row per issued raw token.
    token_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
    )

    # Authoritative server-side expiry, computed from the configured refresh
    # validity at write time (not read back from the token).
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    user: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="refresh_tokens",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<RefreshToken id={self.id} "
            f"user_id={self.user_id} "
            f"expires_at={self.expires_at}>"
        )
