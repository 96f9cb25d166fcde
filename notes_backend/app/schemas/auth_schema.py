"""
schemas/auth_schema.py — Marshmallow schemas for authentication endpoints.

Validation responsibility:
  - This file: field types, lengths, formats.
  - services/auth_service.py: DUPLICATE_EMAIL and credential checks
    (require a DB lookup — not a schema concern).

All schemas inherit from marshmallow.Schema directly so unit tests can
instantiate them without a Flask app context.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates


class RegisterSchema(Schema):
    """
    POST /auth/register

    Field rules:
      email    : valid email format, at most 255 chars
      password : min 8 chars, at least one letter and one digit
    """

    email = fields.Email(
        required=True,
        validate=validate.Length(max=255),
    )

    password = fields.Str(required=True, load_only=True)

    @validates("password")
    def validate_password_strength(self, value: str, **kwargs) -> None:
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")
        if not any(c.isalpha() for c in value):
            raise ValidationError("Password must contain at least one letter.")
        if not any(c.isdigit() for c in value):
            raise ValidationError("Password must contain at least one digit.")


class LoginSchema(Schema):
    """
    POST /auth/login

    Only presence is checked here; correctness is checked in auth_service.py
    (INVALID_CREDENTIALS, 401). No format rule on email so that a malformed
    address gets the same 401 as an unknown one.
    """

    email = fields.Str(required=True)
    password = fields.Str(required=True, load_only=True)


class RefreshTokenSchema(Schema):
    """
    POST /auth/refresh, POST /auth/logout

    The raw refresh token string. Validity is checked in auth_service.py
    (REFRESH_TOKEN_INVALID, 401).
    """

    refresh_token = fields.Str(required=True)
