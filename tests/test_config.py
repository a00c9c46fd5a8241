"""Tests for environment-variable configuration."""

import pytest

from libsql_http.config import get_connection_string, get_log_level, get_timeout
from libsql_http.errors import ConfigurationError


def test_connection_string_from_env(monkeypatch):
    monkeypatch.setenv("LIBSQL_URL", "https://db.example.test")
    monkeypatch.setenv("LIBSQL_AUTH_TOKEN", "tok")
    assert get_connection_string() == "https://db.example.test;tok"


def test_missing_token(monkeypatch):
    monkeypatch.setenv("LIBSQL_URL", "https://db.example.test")
    monkeypatch.delenv("LIBSQL_AUTH_TOKEN", raising=False)
    with pytest.raises(ConfigurationError, match="LIBSQL_AUTH_TOKEN"):
        get_connection_string()


def test_defaults(monkeypatch):
    monkeypatch.delenv("LIBSQL_TIMEOUT", raising=False)
    monkeypatch.delenv("LIBSQL_LOG_LEVEL", raising=False)
    assert get_timeout() == 30.0
    assert get_log_level() == "WARNING"


def test_overrides(monkeypatch):
    monkeypatch.setenv("LIBSQL_TIMEOUT", "2.5")
    monkeypatch.setenv("LIBSQL_LOG_LEVEL", "DEBUG")
    assert get_timeout() == 2.5
    assert get_log_level() == "DEBUG"
