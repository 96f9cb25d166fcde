"""
Unit tests for BcryptHashEncoder. Low cost factor to keep them fast.
"""

from __future__ import annotations

from notes_backend.app.services.hash_encoder import BcryptHashEncoder


def test_encode_does_not_return_plaintext():
    encoded = BcryptHashEncoder(rounds=4).encode("Password1")
    assert encoded != "Password1"
    assert encoded.startswith("$2")


def test_matches_round_trip():
    encoder = BcryptHashEncoder(rounds=4)
    encoded = encoder.encode("Password1")
    assert encoder.matches("Password1", encoded) is True
    assert encoder.matches("Password2", encoded) is False


def test_same_password_gets_distinct_salts():
    encoder = BcryptHashEncoder(rounds=4)
    assert encoder.encode("Password1") != encoder.encode("Password1")


def test_matches_returns_false_for_non_bcrypt_hash():
    assert BcryptHashEncoder(rounds=4).matches("Password1", "plaintext") is False


def test_passwords_beyond_72_bytes_do_not_raise():
    encoder = BcryptHashEncoder(rounds=4)
    long_password = "a1" * 60
    assert encoder.matches(long_password, encoder.encode(long_password)) is True
