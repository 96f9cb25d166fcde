"""
services/token_service.py — TokenCodec: mint and verify signed JWTs.

Every token carries:
  sub  — subject (user id as str)
  type — "access" or "refresh"
  iat, exp
  jti  — random, so two tokens minted in the same second still differ

Access and refresh tokens share the secret, so the `type` claim is the only
thing stopping an access token from being replayed at /auth/refresh (or a
refresh token from being used as a bearer token). Both validate_* methods
check it.

The codec is stateless and holds no Flask imports. The app factory builds
one instance from config at startup and stores it on app.extensions.
"""

from __future__ import annotations

import enum
import secrets
from datetime import datetime, timedelta, timezone

import jwt


class TokenType(str, enum.Enum):
    ACCESS  = "access"
    REFRESH = "refresh"


class MalformedToken(Exception):
    """Signature, structure or claims are invalid. Internal — never sent to clients."""


class TokenExpired(MalformedToken):
    """Signature is fine but the exp claim has passed."""


class TokenCodec:

    def __init__(
            self,
            secret: str,
            access_token_validity_ms: int,
            refresh_token_validity_ms: int,
            algorithm: str = "HS256",
    ) -> None:
        if not secret:
            raise ValueError("TokenCodec requires a non-empty signing secret.")
        self._secret = secret
        self._algorithm = algorithm
        self._access_token_validity_ms = access_token_validity_ms
        self._refresh_token_validity_ms = refresh_token_validity_ms

    @classmethod
    def from_config(cls, config) -> "TokenCodec":
        """Builds a codec from a Flask config mapping."""
        return cls(
            secret=config["JWT_SECRET_KEY"],
            access_token_validity_ms=config["JWT_ACCESS_TOKEN_VALIDITY_MS"],
            refresh_token_validity_ms=config["JWT_REFRESH_TOKEN_VALIDITY_MS"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )

    def __repr__(self) -> str:
        # The secret must never show up in logs or tracebacks.
        return (
            f"TokenCodec(algorithm={self._algorithm!r}, "
            f"access_ms={self._access_token_validity_ms}, "
            f"refresh_ms={self._refresh_token_validity_ms})"
        )

    @property
    def access_token_validity_ms(self) -> int:
        return self._access_token_validity_ms

    @property
    def refresh_token_validity_ms(self) -> int:
        return self._refresh_token_validity_ms

    # ── Minting ────────────────────────────────────────────────────────────

    def generate_access_token(self, subject: str) -> str:
        return self._generate(subject, TokenType.ACCESS, self._access_token_validity_ms)

    def generate_refresh_token(self, subject: str) -> str:
        return self._generate(subject, TokenType.REFRESH, self._refresh_token_validity_ms)

    def _generate(self, subject: str, token_type: TokenType, validity_ms: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(subject),
            "type": token_type.value,
            "iat": now,
            "exp": now + timedelta(milliseconds=validity_ms),
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    # ── Verification ───────────────────────────────────────────────────────

    def validate_access_token(self, token: str) -> bool:
        return self._has_type(token, TokenType.ACCESS)

    def validate_refresh_token(self, token: str) -> bool:
        """True iff the signature verifies, exp is in the future and type=refresh."""
        return self._has_type(token, TokenType.REFRESH)

    def get_subject_from_token(self, token: str) -> str:
        """
        Returns the `sub` claim of a verified token.

        Raises:
          TokenExpired   — exp has passed
          MalformedToken — bad signature, bad structure, missing/empty sub
        """
        subject = self.decode(token).get("sub")
        if not isinstance(subject, str) or not subject:
            raise MalformedToken("Token has no usable 'sub' claim.")
        return subject

    def decode(self, token: str) -> dict:
        """Verifies signature and expiry and returns the claims dict."""
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "type"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token has expired.") from exc
        except jwt.InvalidTokenError as exc:
            # Covers: bad signature, malformed token, missing claims, etc.
            raise MalformedToken("Token is invalid.") from exc

    def _has_type(self, token: str, token_type: TokenType) -> bool:
        try:
            claims = self.decode(token)
        except MalformedToken:
            return False
        return claims.get("type") == token_type.value
