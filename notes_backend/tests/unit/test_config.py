"""
Unit tests for config loading and the production fail-fast guard.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from notes_backend import config


def _app(**overrides) -> SimpleNamespace:
    values = {
        "SQLALCHEMY_DATABASE_URI": "postgresql://db/notes",
        "SECRET_KEY": "s" * 40,
        "JWT_SECRET_KEY": "j" * 40,
        "JWT_ACCESS_TOKEN_VALIDITY_MS": 900_000,
        "JWT_REFRESH_TOKEN_VALIDITY_MS": 2_592_000_000,
    }
    values.update(overrides)
    return SimpleNamespace(config=values)


def test_valid_production_config_passes():
    config.validate_production_config(_app())


@pytest.mark.parametrize("overrides", [
    {"SQLALCHEMY_DATABASE_URI": ""},
    {"SECRET_KEY": "change-me-in-production"},
    {"JWT_SECRET_KEY": "change-me-in-production"},
    {"JWT_REFRESH_TOKEN_VALIDITY_MS": 0},
    {"JWT_ACCESS_TOKEN_VALIDITY_MS": -1},
])
def test_insecure_production_config_rejected(overrides):
    with pytest.raises(ValueError):
        config.validate_production_config(_app(**overrides))


def test_refresh_validity_days_alias(monkeypatch):
    monkeypatch.delenv("JWT_REFRESH_TOKEN_VALIDITY_MS", raising=False)
    monkeypatch.setenv("JWT_REFRESH_TOKEN_EXPIRES_DAYS", "2")
    assert config._refresh_validity_ms() == 2 * 24 * 60 * 60 * 1000


def test_access_validity_ms_wins_over_alias(monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_TOKEN_VALIDITY_MS", "1234")
    monkeypatch.setenv("JWT_ACCESS_TOKEN_EXPIRES_MINUTES", "5")
    assert config._access_validity_ms() == 1234


def test_unparseable_value_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_TOKEN_VALIDITY_MS", "soon")
    assert config._access_validity_ms() == 15 * 60 * 1000


def test_testing_config_defaults():
    testing = config.config_by_name["testing"]
    assert testing.TESTING is True
    assert testing.BCRYPT_LOG_ROUNDS == 4
    assert testing.JWT_REFRESH_TOKEN_VALIDITY_MS > testing.JWT_ACCESS_TOKEN_VALIDITY_MS
