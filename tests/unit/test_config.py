"""Unit tests for Settings validation."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from sessionauth.config import DEFAULT_JWT_SECRET, Settings


def _settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


def test_defaults_are_usable_in_development():
    settings = _settings(environment="development")

    assert settings.jwt_secret == DEFAULT_JWT_SECRET
    assert settings.jwt_access_token_ttl == timedelta(minutes=15)
    assert settings.jwt_refresh_token_ttl == timedelta(days=7)
    assert settings.cookie_name == "refreshToken"
    assert settings.is_development is True


def test_default_secret_refused_outside_development():
    with pytest.raises(ValidationError):
        _settings(environment="production")


def test_short_secret_refused_outside_development():
    with pytest.raises(ValidationError):
        _settings(environment="production", jwt_secret="too-short")


def test_production_with_strong_secret():
    settings = _settings(environment="production", jwt_secret="x" * 40)

    assert settings.is_development is False


def test_only_hs256_is_accepted():
    with pytest.raises(ValidationError):
        _settings(jwt_algorithm="RS256")


def test_ttls_parse_seconds_and_iso_durations():
    settings = _settings(jwt_access_token_ttl=600, jwt_refresh_token_ttl="P30D")

    assert settings.jwt_access_token_ttl == timedelta(minutes=10)
    assert settings.jwt_refresh_token_ttl == timedelta(days=30)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("300", timedelta(seconds=300)),
        ("500ms", timedelta(milliseconds=500)),
        ("45s", timedelta(seconds=45)),
        ("15m", timedelta(minutes=15)),
        ("12h", timedelta(hours=12)),
        ("7d", timedelta(days=7)),
        ("2w", timedelta(weeks=2)),
        ("PT10M", timedelta(minutes=10)),
    ],
)
def test_ttl_string_forms(raw: str, expected: timedelta):
    assert _settings(jwt_refresh_token_ttl=raw).jwt_refresh_token_ttl == expected


@pytest.mark.parametrize("raw", ["15 minutes", "-5", "abc"])
def test_unparseable_ttl_refused(raw: str):
    with pytest.raises(ValidationError):
        _settings(jwt_access_token_ttl=raw)


def test_non_positive_ttl_refused():
    with pytest.raises(ValidationError):
        _settings(jwt_access_token_ttl=0)


def test_ttls_read_from_environment(monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_TOKEN_TTL", "300")
    monkeypatch.setenv("JWT_REFRESH_TOKEN_TTL", "P1D")
    monkeypatch.setenv("COOKIES_DOMAIN", "example.com")

    settings = Settings(_env_file=None)

    assert settings.jwt_access_token_ttl == timedelta(minutes=5)
    assert settings.jwt_refresh_token_ttl == timedelta(days=1)
    assert settings.cookies_domain == "example.com"


def test_settings_are_immutable():
    settings = _settings()

    with pytest.raises(ValidationError):
        settings.jwt_secret = "changed"
