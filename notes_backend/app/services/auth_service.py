"""
services/auth_service.py — Authentication business logic.

Responsibilities:
  - User registration and credential validation
  - Issuing access + refresh token pairs (via TokenCodec)
  - Refresh token lifecycle: storage (hashed), single-use rotation, logout

Layer rules:
  - No imports from routes or schemas
  - No use of flask.request, flask.g, or HTTP routing
  - Commits are the route's responsibility — only flush here

Refresh token design:
  - The refresh token is a signed JWT (type=refresh). Its server-side row is
    the revocation authority: a token whose row is gone is dead, however
    valid its signature.
  - Only base64(SHA-256(raw)) is stored. The raw value is handed to the
    client once.
  - Every refresh consumes the presented token with ONE conditional DELETE
    and issues a fresh pair. Two concurrent refreshes of the same token race
    on that DELETE; the database lets at most one of them see rowcount == 1.
  - Reuse of a consumed token is rejected but does NOT revoke the user's
    other refresh tokens. See DESIGN.md (hardening gap).

Every refresh failure leaves this module as the same AppError. The specific
RefreshFailure reason is logged for audit and nothing else.
"""

from __future__ import annotations

import base64
import enum
import hashlib
import logging
import weakref
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notes_backend.app.errors import (
    AppError,
    ErrorCode,
    invalid_credentials,
    refresh_token_invalid,
)
from notes_backend.app.models.refresh_token import RefreshToken
from notes_backend.app.models.user import User
from notes_backend.app.services.token_service import MalformedToken, TokenCodec

logger = logging.getLogger(__name__)

# One throwaway hash per encoder, checked when the login email is unknown.
_dummy_hashes: "weakref.WeakKeyDictionary[object, str]" = weakref.WeakKeyDictionary()


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str

    def to_dict(self) -> dict:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
        }


class RefreshFailure(str, enum.Enum):
    """Why a refresh was rejected. Logged only; the client always sees REFRESH_TOKEN_INVALID."""

    INVALID_TOKEN      = "invalid_token"       # bad signature, expired JWT, or type != refresh
    BAD_SUBJECT        = "bad_subject"         # sub claim is not a user id
    USER_NOT_FOUND     = "user_not_found"      # user deleted after issuance
    NOT_RECOGNIZED     = "not_recognized"      # no row: already used, or never issued
    RECORD_EXPIRED     = "record_expired"      # row existed but expires_at has passed
    LOST_RACE          = "lost_race"           # row vanished between lookup and delete


@dataclass(frozen=True)
class RefreshOutcome:
    pair: TokenPair | None = None
    failure: RefreshFailure | None = None
    user_id: int | None = None

    @property
    def ok(self) -> bool:
        return self.pair is not None


# ── Private helpers ────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything stored here is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def hash_token(raw_token: str) -> str:
    """base64(SHA-256(raw_token)) — the only form of a refresh token that is persisted."""
    digest = hashlib.sha256(raw_token.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def build_user_dict(user: User) -> dict:
    """Serialises a User to a plain dict. The password hash is never included."""
    return {
        "id": user.id,
        "email": user.email,
        "created_at": user.created_at.isoformat(),
    }


# ── Service ────────────────────────────────────────────────────────────────

class AuthService:
    """
    Registration, login and refresh-token rotation for one unit of work.

    Built per request by the route layer with the app-wide TokenCodec and
    hash encoder and the request's SQLAlchemy session. Holds no state
    between requests.
    """

    _DUMMY_PASSWORD = "not-a-real-password-0"

    def __init__(self, token_codec: TokenCodec, hash_encoder, session: Session) -> None:
        self._codec = token_codec
        self._hash_encoder = hash_encoder
        self._session = session

    # ── Registration / login ───────────────────────────────────────────────

    def register(self, email: str, password: str) -> User:
        """
        Creates a user with a hashed password.

        Raises:
          AppError(DUPLICATE_EMAIL, 409) — email already registered
        """
        existing = self._session.execute(
            select(User.id).where(User.email == email)
        ).scalar_one_or_none()
        if existing is not None:
            raise self._duplicate_email(email)

        user = User(email=email, password_hash=self._hash_encoder.encode(password))
        self._session.add(user)
        try:
            self._session.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email.
            self._session.rollback()
            raise self._duplicate_email(email) from None

        logger.info("Registered user id=%s", user.id)
        return user

    def login(self, email: str, password: str) -> TokenPair:
        """
        Validates credentials and issues a new token pair.

        Raises:
          AppError(INVALID_CREDENTIALS, 401) — unknown email or wrong password.
          Both cases run one bcrypt check and raise the same error.
        """
        user = self._session.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()

        if user is None:
            self._hash_encoder.matches(password, self._dummy_hash())
            logger.info("Login rejected: unknown email")
            raise invalid_credentials()

        if not self._hash_encoder.matches(password, user.password_hash):
            logger.info("Login rejected: wrong password for user id=%s", user.id)
            raise invalid_credentials()

        pair = self._issue_pair(user.id)
        logger.info("Login succeeded for user id=%s", user.id)
        return pair

    def get_user(self, user_id: int) -> User:
        """
        Raises:
          AppError(USER_NOT_FOUND, 404) — user_id from the JWT no longer exists.
        """
        user = self._session.get(User, user_id)
        if user is None:
            raise AppError(
                ErrorCode.USER_NOT_FOUND,
                f"User {user_id} not found.",
                404,
            )
        return user

    # ── Refresh rotation ───────────────────────────────────────────────────

    def refresh(self, raw_refresh_token: str) -> TokenPair:
        """
        Consumes a refresh token and returns a brand-new pair.

        Raises:
          AppError(REFRESH_TOKEN_INVALID, 401) — for every failure reason.
        """
        outcome = self.rotate(raw_refresh_token)
        if not outcome.ok:
            logger.info(
                "Refresh rejected: reason=%s user_id=%s",
                outcome.failure.value,
                outcome.user_id,
            )
            raise refresh_token_invalid()
        logger.info("Refresh token rotated for user id=%s", outcome.user_id)
        return outcome.pair

    def rotate(self, raw_refresh_token: str) -> RefreshOutcome:
        """Rotation with the failure reason kept. refresh() maps it to one AppError."""
        # Step 1: signature, expiry and type=refresh.
        if not self._codec.validate_refresh_token(raw_refresh_token):
            return RefreshOutcome(failure=RefreshFailure.INVALID_TOKEN)

        # Step 2: subject → user.
        try:
            subject = self._codec.get_subject_from_token(raw_refresh_token)
        except MalformedToken:
            return RefreshOutcome(failure=RefreshFailure.INVALID_TOKEN)
        try:
            user_id = int(subject)
        except ValueError:
            return RefreshOutcome(failure=RefreshFailure.BAD_SUBJECT)

        if self._session.get(User, user_id) is None:
            return RefreshOutcome(failure=RefreshFailure.USER_NOT_FOUND, user_id=user_id)

        # Step 3: the server-side record must still exist.
        token_hash = hash_token(raw_refresh_token)
        now = _utcnow()
        record, expired = self._lookup_record(user_id, token_hash, now)
        if expired:
            return RefreshOutcome(failure=RefreshFailure.RECORD_EXPIRED, user_id=user_id)
        if record is None:
            return RefreshOutcome(failure=RefreshFailure.NOT_RECOGNIZED, user_id=user_id)

        # Step 4: consume. Only the caller whose DELETE hits the row may continue.
        if not self._consume(user_id, token_hash, now):
            return RefreshOutcome(failure=RefreshFailure.LOST_RACE, user_id=user_id)

        # Steps 5-6: fresh pair, new refresh half persisted.
        return RefreshOutcome(pair=self._issue_pair(user_id), user_id=user_id)

    def logout(self, user_id: int, raw_refresh_token: str) -> None:
        """
        Deletes the caller's refresh token record.

        Raises:
          AppError(REFRESH_TOKEN_INVALID, 401) — no live record for this user.
        """
        if not self._consume(user_id, hash_token(raw_refresh_token), _utcnow()):
            logger.info("Logout rejected: refresh token not recognized for user id=%s", user_id)
            raise refresh_token_invalid()
        logger.info("Logged out refresh token for user id=%s", user_id)

    # ── Refresh token persistence ──────────────────────────────────────────

    def store_refresh_token(self, user_id: int, raw_refresh_token: str) -> RefreshToken:
        """Persists the digest of a freshly minted refresh token. Never the raw value."""
        now = _utcnow()
        record = RefreshToken(
            user_id=user_id,
            token_hash=hash_token(raw_refresh_token),
            expires_at=now + timedelta(milliseconds=self._codec.refresh_token_validity_ms),
            created_at=now,
        )
        self._session.add(record)
        # flush so the row exists before the token leaves this service
        self._session.flush()
        return record

    def find_refresh_token(self, user_id: int, raw_refresh_token: str) -> RefreshToken | None:
        """
        Live record for (user_id, digest of raw token), or None.

        An expired row counts as absent and is deleted on the way out.
        """
        record, _ = self._lookup_record(user_id, hash_token(raw_refresh_token), _utcnow())
        return record

    def _lookup_record(
            self,
            user_id: int,
            token_hash: str,
            now: datetime,
    ) -> tuple[RefreshToken | None, bool]:
        """
        Returns (live record or None, expired).

        A row whose expires_at has passed is deleted here and reported as
        (None, True); no TTL index removes it for us.
        """
        record = self._session.execute(
            select(RefreshToken).where(
                RefreshToken.user_id == user_id,
                RefreshToken.token_hash == token_hash,
            )
        ).scalar_one_or_none()
        if record is not None and _as_utc(record.expires_at) <= now:
            self._delete_record(user_id, token_hash)
            return None, True
        return record, False

    def _consume(self, user_id: int, token_hash: str, now: datetime) -> bool:
        """Single conditional DELETE. True only for the caller that removed the row."""
        result = self._session.execute(
            delete(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.token_hash == token_hash,
                RefreshToken.expires_at > now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _delete_record(self, user_id: int, token_hash: str) -> None:
        self._session.execute(
            delete(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.token_hash == token_hash,
            )
            .execution_options(synchronize_session=False)
        )

    def _issue_pair(self, user_id: int) -> TokenPair:
        subject = str(user_id)
        pair = TokenPair(
            access_token=self._codec.generate_access_token(subject),
            refresh_token=self._codec.generate_refresh_token(subject),
        )
        self.store_refresh_token(user_id, pair.refresh_token)
        return pair

    def _dummy_hash(self) -> str:
        cached = _dummy_hashes.get(self._hash_encoder)
        if cached is None:
            cached = self._hash_encoder.encode(self._DUMMY_PASSWORD)
            _dummy_hashes[self._hash_encoder] = cached
        return cached

    @staticmethod
    def _duplicate_email(email: str) -> AppError:
        return AppError(
            ErrorCode.DUPLICATE_EMAIL,
            f"The email address '{email}' is already registered.",
            409,
            field="email",
        )
