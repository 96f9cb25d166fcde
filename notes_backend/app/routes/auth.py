"""
routes/auth.py — Authentication route handlers.

Layer rules:
  - Parse request body
  - Validate with the appropriate schema (raises ValidationError on bad input)
  - Call exactly ONE service method
  - Commit the DB session
  - Return the standard response envelope: {"data": {...}, "warnings": []}

AppError propagates to the global error handler in app/__init__.py. A failed
service call never reaches commit(); the request's session is rolled back
when Flask-SQLAlchemy tears it down. The one exception is /refresh, which
commits before re-raising so an expired record deleted during the lookup
stays deleted.

Endpoints (url_prefix=/api/v1/auth):
  POST   /auth/register  → 201
  POST   /auth/login     → 200
  POST   /auth/refresh   → 200
  POST   /auth/logout    → 200
  GET    /auth/me        → 200
"""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from notes_backend.app.errors import AppError
from notes_backend.app.extensions import HASH_ENCODER_KEY, TOKEN_CODEC_KEY, db
from notes_backend.app.middleware.auth_middleware import require_auth
from notes_backend.app.schemas.auth_schema import LoginSchema, RefreshTokenSchema, RegisterSchema
from notes_backend.app.services.auth_service import AuthService, build_user_dict

auth_bp = Blueprint("auth", __name__)


def _auth_service() -> AuthService:
    return AuthService(
        token_codec=current_app.extensions[TOKEN_CODEC_KEY],
        hash_encoder=current_app.extensions[HASH_ENCODER_KEY],
        session=db.session,
    )


@auth_bp.route("/register", methods=["POST"])
def register():
    """POST /auth/register — Create account. (No auth required.)"""
    data = RegisterSchema().load(request.get_json(force=True) or {})
    user = _auth_service().register(
        email=data["email"],
        password=data["password"],
    )
    db.session.commit()
    return jsonify({"data": {"user": build_user_dict(user)}, "warnings": []}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    """POST /auth/login — Authenticate; return a token pair. (No auth required.)"""
    data = LoginSchema().load(request.get_json(force=True) or {})
    pair = _auth_service().login(
        email=data["email"],
        password=data["password"],
    )
    db.session.commit()
    return jsonify({"data": pair.to_dict(), "warnings": []}), 200


@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    """POST /auth/refresh — Consume a refresh token; return a new token pair."""
    data = RefreshTokenSchema().load(request.get_json(force=True) or {})
    try:
        pair = _auth_service().refresh(data["refresh_token"])
    except AppError:
        # A rejected refresh may have deleted an expired record; keep that.
        db.session.commit()
        raise
    db.session.commit()
    return jsonify({"data": pair.to_dict(), "warnings": []}), 200


@auth_bp.route("/logout", methods=["POST"])
@require_auth
def logout():
    """POST /auth/logout — Delete the caller's refresh token. (Auth required.)"""
    data = RefreshTokenSchema().load(request.get_json(force=True) or {})
    _auth_service().logout(
        user_id=g.user_id,
        raw_refresh_token=data["refresh_token"],
    )
    db.session.commit()
    return jsonify({"data": {"message": "Logged out successfully."}, "warnings": []}), 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    """GET /auth/me — Return current user profile. (Auth required.)"""
    user = _auth_service().get_user(g.user_id)
    return jsonify({"data": build_user_dict(user), "warnings": []}), 200
