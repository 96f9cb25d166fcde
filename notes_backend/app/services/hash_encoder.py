"""
services/hash_encoder.py — bcrypt password hashing.

The auth service only depends on encode()/matches(); the algorithm is an
implementation detail of this module. Raw passwords are never stored or logged.
"""

from __future__ import annotations

import bcrypt

# bcrypt ignores everything past 72 bytes; newer releases raise instead.
_BCRYPT_MAX_BYTES = 72


def _to_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class BcryptHashEncoder:

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def encode(self, password: str) -> str:
        return bcrypt.hashpw(
            _to_bytes(password),
            bcrypt.gensalt(rounds=self._rounds),
        ).decode("utf-8")

    def matches(self, password: str, password_hash: str) -> bool:
        # bcrypt.checkpw compares in constant time.
        try:
            return bcrypt.checkpw(_to_bytes(password), password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash.
            return False
