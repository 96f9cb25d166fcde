"""
extensions.py — Flask extension singletons.

Initialises SQLAlchemy as a module-level object so it can be imported anywhere
without creating circular dependencies.

Pattern:
    1. Create the extension object here (no app attached yet).
    2. Call init_app(app) inside the app factory in app/__init__.py.
    3. Import `db` from here wherever needed.

    from notes_backend.app.extensions import db

Do not pass the app object directly to SQLAlchemy() at import time — that
would prevent running tests with a separate test app instance.

The per-app auth collaborators (TokenCodec, HashEncoder) are built by the app
factory from config and stored on app.extensions under the keys below.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

TOKEN_CODEC_KEY  = "token_codec"
HASH_ENCODER_KEY = "hash_encoder"
