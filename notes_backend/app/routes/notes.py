"""
routes/notes.py — Note route handlers. Every endpoint requires a bearer token.

Endpoints (url_prefix=/api/v1/notes):
  POST   /notes/        → 201 created, 200 updated (body carries "id")
  GET    /notes/        → 200
  DELETE /notes/<id>    → 200
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from notes_backend.app.extensions import db
from notes_backend.app.middleware.auth_middleware import require_auth
from notes_backend.app.schemas.note_schema import SaveNoteSchema
from notes_backend.app.services import note_service

notes_bp = Blueprint("notes", __name__)


@notes_bp.route("/", methods=["POST"])
@require_auth
def save_note():
    data = SaveNoteSchema().load(request.get_json(force=True) or {})
    result, created = note_service.save_note(
        user_id=g.user_id,
        title=data["title"],
        content=data["content"],
        color=data["color"],
        note_id=data["id"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201 if created else 200


@notes_bp.route("/", methods=["GET"])
@require_auth
def list_notes():
    result = note_service.list_notes(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@notes_bp.route("/<int:note_id>", methods=["DELETE"])
@require_auth
def delete_note(note_id: int):
    note_service.delete_note(note_id=note_id, user_id=g.user_id, session=db.session)
    db.session.commit()
    return jsonify({"data": {"message": "Note deleted."}, "warnings": []}), 200
