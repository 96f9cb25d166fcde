"""
middleware/auth_middleware.py — Bearer access-token authentication decorator.

The @require_auth decorator:
  1. Reads the Authorization header (expected: "Bearer <token>")
  2. Verifies signature, expiry and type=access via the app's TokenCodec
  3. Attaches user_id (int) to flask.g for the duration of the request
  4. Raises the appropriate 401 AppError if any step fails

Responsibility boundary:
  - This middleware authenticates (401) and attaches g.user_id ONLY.
  - Ownership checks (403) belong in the service layer.

Error codes:
  TOKEN_MISSING  (401) — no Authorization header
  TOKEN_INVALID  (401) — malformed header, bad signature, refresh token
                         presented as a bearer token, or bad subject
  TOKEN_EXPIRED  (401) — valid token but exp claim is in the past
"""

from __future__ import annotations

import functools
import logging
from typing import Callable

from flask import current_app, g, request

from notes_backend.app.errors import AppError, ErrorCode
from notes_backend.app.extensions import TOKEN_CODEC_KEY
from notes_backend.app.services.token_service import MalformedToken, TokenExpired, TokenType

logger = logging.getLogger(__name__)


def require_auth(f: Callable) -> Callable:
    """
    Route decorator that enforces bearer access-token authentication.

    Usage:
        @notes_bp.route("/", methods=["GET"])
        @require_auth
        def list_notes():
            user_id = g.user_id  # always an int when this runs
            ...
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        _authenticate_request()
        return f(*args, **kwargs)

    return decorated


def _authenticate_request() -> None:
    """
    Performs the full authentication sequence and sets flask.g.user_id.

    Raises AppError on any authentication failure; the global error handler
    turns it into the JSON envelope.
    """
    auth_header = request.headers.get("Authorization", "")

    # ── Step 1: Require Authorization header ──────────────────────────────
    if not auth_header:
        raise AppError(
            ErrorCode.TOKEN_MISSING,
            "Authentication required. Provide a Bearer token in the Authorization header.",
            401,
        )

    # ── Step 2: Parse "Bearer <token>" format ─────────────────────────────
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AppError(
            ErrorCode.TOKEN_INVALID,
            "Authorization header must be in the format: Bearer <token>.",
            401,
        )

    raw_token = parts[1]
    codec = current_app.extensions[TOKEN_CODEC_KEY]

    # ── Step 3: Verify the token ──────────────────────────────────────────
    try:
        claims = codec.decode(raw_token)
    except TokenExpired:
        # Client should use POST /auth/refresh.
        raise AppError(
            ErrorCode.TOKEN_EXPIRED,
            "The access token has expired. Use POST /auth/refresh to obtain a new one.",
            401,
        )
    except MalformedToken:
        raise AppError(
            ErrorCode.TOKEN_INVALID,
            "The access token is invalid or has been tampered with.",
            401,
        )

    # ── Step 4: Refresh tokens are not bearer credentials ─────────────────
    if claims.get("type") != TokenType.ACCESS.value:
        logger.info("Rejected non-access token presented as bearer credential")
        raise AppError(
            ErrorCode.TOKEN_INVALID,
            "The access token is invalid or has been tampered with.",
            401,
        )

    # ── Step 5: Subject must be a user id ─────────────────────────────────
    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise AppError(
            ErrorCode.TOKEN_INVALID,
            "The 'sub' claim in the access token is not a valid user ID.",
            401,
        )

    g.user_id = user_id
