"""Shared test fixtures."""

import base64
import json
import sqlite3

import aiosqlite
import httpx
import pytest_asyncio

from libsql_http.db.connection import Connection

BASE_URL = "https://db.example.test"
TOKEN = "secret-token"
CONNECTION_STRING = f"{BASE_URL};{TOKEN}"


def _to_sqlite(arg: dict):
    kind = arg["type"]
    if kind == "null":
        return None
    if kind == "integer":
        return int(arg["value"])
    if kind == "float":
        return float(arg["value"])
    if kind == "blob":
        return base64.b64decode(arg.get("value") or arg.get("base64") or "")
    return arg["value"]


def _to_cell(value) -> dict:
    if value is None:
        return {"type": "null"}
    if isinstance(value, int):
        return {"type": "integer", "value": str(value)}
    if isinstance(value, float):
        return {"type": "float", "value": value}
    if isinstance(value, bytes):
        return {"type": "blob", "base64": base64.b64encode(value).decode("ascii")}
    return {"type": "text", "value": value}


def ok(result: dict | None = None, *, close: bool = False) -> dict:
    """One successful pipeline entry."""
    if close:
        return {"type": "ok", "response": {"type": "close"}}
    return {"type": "ok", "response": {"type": "execute", "result": result}}


def result(cols=(), rows=(), affected: int = 0) -> dict:
    """An execute result with ``cols`` names and rows of raw Python values."""
    return {
        "cols": [{"name": name, "decltype": None} for name in cols],
        "rows": [[_to_cell(value) for value in row] for row in rows],
        "affected_row_count": affected,
        "last_insert_rowid": None,
    }


def canned(*bodies: dict, status: int = 200):
    """Handler returning the given response bodies in turn, then the last one forever."""
    queue = list(bodies)

    def handler(request: httpx.Request) -> httpx.Response:
        body = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(status, json=body)

    return handler


class FakeLibSqlServer:
    """Pipeline endpoint backed by an in-memory SQLite database.

    Executes each request in order on one aiosqlite connection and answers
    in the shape of the real endpoint. Failed statements produce error
    entries. Records every request body and Authorization header.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.bodies: list[dict] = []
        self.auth_headers: list[str | None] = []
        self.urls: list[str] = []

    @property
    def statements(self) -> list[str]:
        """SQL of every execute request received, in order."""
        return [
            req["stmt"]["sql"]
            for body in self.bodies
            for req in body["requests"]
            if req["type"] == "execute"
        ]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.bodies.append(body)
        self.auth_headers.append(request.headers.get("Authorization"))
        self.urls.append(str(request.url))

        results = []
        for req in body["requests"]:
            if req["type"] == "close":
                results.append(ok(close=True))
                continue
            stmt = req["stmt"]
            args = [_to_sqlite(arg) for arg in stmt.get("args", [])]
            try:
                cursor = await self.conn.execute(stmt["sql"], args)
                rows = await cursor.fetchall()
                await self.conn.commit()
            except sqlite3.Error as exc:
                results.append({"type": "error", "error": {"message": str(exc), "code": "SQLITE_ERROR"}})
                continue
            cols = [{"name": d[0], "decltype": None} for d in cursor.description or ()]
            affected = cursor.rowcount if cursor.rowcount and cursor.rowcount > 0 else 0
            results.append(
                ok(
                    {
                        "cols": cols,
                        "rows": [[_to_cell(value) for value in row] for row in rows],
                        "affected_row_count": affected,
                        "last_insert_rowid": None,
                    }
                )
            )
        return httpx.Response(200, json={"baton": None, "base_url": None, "results": results})


@pytest_asyncio.fixture
async def sqlite_db():
    """In-memory SQLite database behind the fake server."""
    conn = await aiosqlite.connect(":memory:")
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def server(sqlite_db):
    """Fake pipeline endpoint."""
    return FakeLibSqlServer(sqlite_db)


@pytest_asyncio.fixture
async def http_client(server):
    """HTTP client routed to the fake server."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(server.handle)) as client:
        yield client


@pytest_asyncio.fixture
async def connection(http_client):
    """Open connection talking to the fake server."""
    conn = Connection(CONNECTION_STRING, http_client=http_client)
    await conn.aopen()
    yield conn
    await conn.aclose()


@pytest_asyncio.fixture
async def items(connection):
    """Connection with an ``Items`` table holding one row."""
    cmd = connection.create_command(
        'CREATE TABLE "Items" ("Id" TEXT PRIMARY KEY, "Name" TEXT, "Version" INTEGER);'
        "INSERT INTO \"Items\" VALUES ('a1', 'first', 1);"
    )
    await cmd.aexecute_non_query()
    return connection
