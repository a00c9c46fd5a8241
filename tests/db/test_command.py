"""Tests for Command against the fake pipeline server."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from libsql_http.errors import (
    ConcurrencyViolationError,
    ErrorKind,
    InvalidStateError,
    ParameterNotFoundError,
    ProtocolError,
    UnsupportedOperationError,
)
from libsql_http.models.types import DbType

GUID_TEXT = "15c7b691-7a52-4fa6-9395-79f52a63df0b"


@pytest.mark.asyncio
async def test_empty_text_sends_nothing(connection, server):
    assert await connection.create_command("   ").aexecute_non_query() == 0
    assert server.bodies == []


@pytest.mark.asyncio
async def test_non_query_posts_once_per_statement(items, server):
    before = len(server.bodies)
    cmd = items.create_command(
        "INSERT INTO \"Items\" VALUES ('b2', 'second', 1);"
        "INSERT INTO \"Items\" VALUES ('c3', 'third', 1);"
    )
    assert await cmd.aexecute_non_query() == 2
    assert len(server.bodies) - before == 2


@pytest.mark.asyncio
async def test_literal_semicolon_not_split(connection):
    await connection.create_command("CREATE TABLE t (v TEXT);").aexecute_non_query()
    await connection.create_command("INSERT INTO t VALUES ('a;b');").aexecute_non_query()
    assert await connection.create_command("SELECT v FROM t").aexecute_scalar() == "a;b"


@pytest.mark.asyncio
async def test_keyed_update_returns_changes(items, server):
    cmd = items.create_command('UPDATE "Items" SET "Name" = @p0 WHERE "Id" = @p1')
    cmd.parameters.add_with_value("@p0", "renamed")
    cmd.parameters.add_with_value("@p1", "a1")

    assert await cmd.aexecute_non_query() == 1
    assert server.statements[-4:] == [
        'SELECT COUNT(*) FROM "Items" WHERE "Id" = ?1;',
        'UPDATE "Items" SET "Name" = ?1 WHERE "Id" = ?2',
        "SELECT changes();",
        'SELECT * FROM "Items" WHERE "Id" = ?1;',
    ]
    name = await items.create_command("SELECT \"Name\" FROM \"Items\" WHERE \"Id\" = 'a1'").aexecute_scalar()
    assert name == "renamed"


@pytest.mark.asyncio
@pytest.mark.parametrize("target", ['main."Items"', '"main"."Items"'])
async def test_keyed_update_of_schema_qualified_table(items, server, target):
    cmd = items.create_command(f'UPDATE {target} SET "Name" = @p0 WHERE "Id" = @p1')
    cmd.parameters.add_with_value("@p0", "qualified")
    cmd.parameters.add_with_value("@p1", "a1")

    assert await cmd.aexecute_non_query() == 1
    assert server.statements[-4] == 'SELECT COUNT(*) FROM "main"."Items" WHERE "Id" = ?1;'
    assert server.statements[-1] == 'SELECT * FROM "main"."Items" WHERE "Id" = ?1;'


@pytest.mark.asyncio
async def test_update_of_missing_row_is_concurrency_violation(items):
    cmd = items.create_command('UPDATE "Items" SET "Name" = @p0 WHERE "Id" = @p1')
    cmd.parameters.add_with_value("@p0", "x")
    cmd.parameters.add_with_value("@p1", "missing")

    with pytest.raises(ConcurrencyViolationError) as exc_info:
        await cmd.aexecute_non_query()
    assert exc_info.value.kind is ErrorKind.CONCURRENCY_VIOLATION
    assert exc_info.value.message == "The record with ID 'missing' was not found."


@pytest.mark.asyncio
async def test_stale_version_is_concurrency_violation(items):
    cmd = items.create_command(
        'UPDATE "Items" SET "Name" = @p0, "Version" = "Version" + 1 '
        'WHERE "Id" = @p1 AND "Version" = @p2'
    )
    cmd.parameters.add_with_value("@p0", "x")
    cmd.parameters.add_with_value("@p1", "a1")
    cmd.parameters.add_with_value("@p2", 7)

    with pytest.raises(ConcurrencyViolationError, match="modified or deleted by another process") as exc_info:
        await cmd.aexecute_non_query()
    assert exc_info.value.expected_version == 7


@pytest.mark.asyncio
async def test_keyed_delete(items):
    cmd = items.create_command('DELETE FROM "Items" WHERE "Id" = @id')
    cmd.parameters.add_with_value("id", "a1")
    assert await cmd.aexecute_non_query() == 1
    with pytest.raises(ConcurrencyViolationError):
        await cmd.aexecute_non_query()


@pytest.mark.asyncio
async def test_unkeyed_delete_of_nothing_is_zero(items):
    cmd = items.create_command("DELETE FROM \"Items\" WHERE \"Name\" = 'nobody'")
    assert await cmd.aexecute_non_query() == 0


@pytest.mark.asyncio
async def test_boolean_parameter_sent_as_integer(connection, server):
    cmd = connection.create_command("SELECT @flag")
    cmd.parameters.add_with_value("@flag", True)
    assert await cmd.aexecute_scalar() == 1
    arg = server.bodies[-1]["requests"][0]["stmt"]["args"][0]
    assert (arg["type"], arg["value"]) == ("integer", "1")


@pytest.mark.asyncio
async def test_guid_text_round_trips_unchanged(connection):
    await connection.create_command("CREATE TABLE g (id TEXT)").aexecute_non_query()
    insert = connection.create_command("INSERT INTO g VALUES (@id)")
    insert.parameters.add_with_value("@id", GUID_TEXT, DbType.GUID)
    await insert.aexecute_non_query()

    reader = await connection.create_command("SELECT id FROM g").aexecute_reader()
    assert reader.read()
    assert reader.get_string(0) == GUID_TEXT
    assert reader.get_guid(0) == uuid.UUID(GUID_TEXT)


@pytest.mark.asyncio
async def test_local_datetime_read_back_as_utc(connection):
    await connection.create_command("CREATE TABLE d (at TEXT)").aexecute_non_query()
    local = datetime(2024, 1, 15, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    insert = connection.create_command("INSERT INTO d VALUES (@at)")
    insert.parameters.add_with_value("@at", local, DbType.DATETIME)
    await insert.aexecute_non_query()

    reader = await connection.create_command("SELECT at FROM d").aexecute_reader()
    assert reader.read()
    value = reader.get_datetime(0)
    assert value == datetime(2024, 1, 15, 10, 0)
    assert value.tzinfo is None


@pytest.mark.asyncio
async def test_blob_round_trip(connection):
    await connection.create_command("CREATE TABLE b (data BLOB)").aexecute_non_query()
    insert = connection.create_command("INSERT INTO b VALUES (@data)")
    insert.parameters.add_with_value("@data", b"\x00\xffbinary")
    await insert.aexecute_non_query()
    reader = await connection.create_command("SELECT data FROM b").aexecute_reader()
    assert reader.read()
    assert reader.get_bytes(0) == b"\x00\xffbinary"


@pytest.mark.asyncio
async def test_reader_multiple_results(items):
    reader = await items.create_command(
        'SELECT "Id", "Name" FROM "Items"; SELECT COUNT(*) AS n FROM "Items";'
    ).aexecute_reader()
    assert reader.field_count == 2
    assert reader.read()
    assert reader["Name"] == "first"
    assert not reader.read()
    assert reader.next_result()
    assert reader.read()
    assert reader.get_int64(reader.get_ordinal("n")) == 1
    assert not reader.next_result()


@pytest.mark.asyncio
async def test_scalar_count(items):
    assert await items.create_command('SELECT COUNT(*) FROM "Items"').aexecute_scalar() == 1


@pytest.mark.asyncio
async def test_scalar_sqlite_master_lookup(connection):
    cmd = connection.create_command("SELECT name FROM sqlite_master WHERE name = 'nope'")
    assert await cmd.aexecute_scalar() == 0


@pytest.mark.asyncio
async def test_missing_parameter(connection, server):
    with pytest.raises(ParameterNotFoundError):
        await connection.create_command("SELECT @nope").aexecute_scalar()
    assert server.bodies == []


@pytest.mark.asyncio
async def test_sql_error_is_protocol_error(connection):
    with pytest.raises(ProtocolError, match="no such table") as exc_info:
        await connection.create_command("SELECT * FROM nowhere").aexecute_reader()
    assert exc_info.value.sql == "SELECT * FROM nowhere"


@pytest.mark.asyncio
async def test_scalar_on_empty_text_is_invalid(connection):
    with pytest.raises(InvalidStateError):
        await connection.create_command("").aexecute_scalar()


def test_cancel_is_unsupported():
    from libsql_http.db.connection import Connection

    cmd = Connection("https://db.example.test;t").create_command("SELECT 1")
    with pytest.raises(UnsupportedOperationError):
        cmd.cancel()


def test_create_parameter_is_not_added():
    from libsql_http.db.connection import Connection

    cmd = Connection("https://db.example.test;t").create_command("SELECT @x")
    param = cmd.create_parameter("@x", 1)
    assert param.db_type == DbType.INT64
    assert len(cmd.parameters) == 0
    assert cmd.timeout == 30.0
