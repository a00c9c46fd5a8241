"""Tests for the command-line entry point."""

import functools

import httpx
import pytest
from conftest import canned, ok, result

import libsql_http.__main__ as cli
from libsql_http.db.connection import Connection


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("LIBSQL_URL", "https://db.example.test")
    monkeypatch.setenv("LIBSQL_AUTH_TOKEN", "tok")


def _route(monkeypatch, *bodies):
    client = httpx.AsyncClient(transport=httpx.MockTransport(canned(*bodies)))
    monkeypatch.setattr(cli, "Connection", functools.partial(Connection, http_client=client))


def test_prints_rows(env, monkeypatch, capsys):
    _route(monkeypatch, {"results": [ok(result(["id", "name"], [[1, "a"], [2, None]])), ok(close=True)]})
    assert cli.main(["SELECT", "id, name FROM t"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["id\tname", "1\ta", "2\tNULL"]


def test_sql_error_exits_one(env, monkeypatch, capsys):
    _route(monkeypatch, {"results": [{"type": "error", "error": {"message": "no such table: t"}}]})
    assert cli.main(["SELECT * FROM t"]) == 1
    assert "no such table: t" in capsys.readouterr().err


def test_missing_configuration_exits_one(monkeypatch, capsys):
    monkeypatch.delenv("LIBSQL_URL", raising=False)
    monkeypatch.delenv("LIBSQL_AUTH_TOKEN", raising=False)
    assert cli.main(["SELECT 1"]) == 1
    assert "LIBSQL_URL" in capsys.readouterr().err


def test_usage_without_arguments(capsys):
    assert cli.main([]) == 2
    assert "usage" in capsys.readouterr().err
