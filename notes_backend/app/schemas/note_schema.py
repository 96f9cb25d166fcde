"""
schemas/note_schema.py — Marshmallow schema for note writes.
"""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from notes_backend.app.models.note import MAX_NOTE_ID


class SaveNoteSchema(Schema):
    """
    POST /notes

    id      : optional; when present the existing note is updated
    title   : 1–200 chars
    content : any text, may be empty
    color   : ARGB integer, 0 .. 0xFFFFFFFF
    """

    id = fields.Int(
        load_default=None,
        allow_none=True,
        strict=True,
        validate=validate.Range(
            min=1,
            max=MAX_NOTE_ID,
            error="Note id must be between 1 and {max}.",
        ),
    )

    title = fields.Str(
        required=True,
        validate=validate.Length(
            min=1,
            max=200,
            error="Title must be between 1 and 200 characters.",
        ),
    )

    content = fields.Str(required=True)

    color = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(
            min=0,
            max=0xFFFFFFFF,
            error="Color must be an ARGB value between 0 and 4294967295.",
        ),
    )
