"""LibSQL-over-HTTP implementation of the Database protocol.

SQL uses ``?`` placeholders; this backend translates them to ``@p0, @p1, ...``
at execute time and binds the positional parameters under those names.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from libsql_http.db.connection import Connection, create_connection
from libsql_http.db.reader import DataReader
from libsql_http.sql.splitter import OperationKind, classify

if TYPE_CHECKING:
    import httpx

    from libsql_http.db.backend import Cursor, Params, Row
    from libsql_http.db.command import Command
    from libsql_http.pipeline.table import ResultColumn

logger = logging.getLogger(__name__)

# Bare ``?`` only; ``?1`` style placeholders are left alone
_PLACEHOLDER_RE = re.compile(r"\?(?!\d)")


def _translate_placeholders(sql: str) -> str:
    """Convert ``?`` placeholders to ``@p0, @p1, ...``."""
    counter = -1

    def _replace(_match: re.Match[str]) -> str:
        nonlocal counter
        counter += 1
        return f"@p{counter}"

    return _PLACEHOLDER_RE.sub(_replace, sql)


class LibSqlCursor:
    """Wraps a buffered DataReader as a Cursor."""

    def __init__(self, reader: DataReader | None = None, rowcount: int = -1) -> None:
        """Initialize with a reader for queries, or just a count for modifications."""
        self._reader = reader
        self._rowcount = rowcount if reader is None else reader.records_affected

    @property
    def description(self) -> list[ResultColumn]:
        """Columns of the current result table; empty for modifications."""
        if self._reader is None:
            return []
        return self._reader.columns

    @property
    def rowcount(self) -> int:
        """Rows affected by the statement, or -1 when it modified nothing."""
        return self._rowcount

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        if self._reader is None:
            return None
        return next(iter(self._reader), None)

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows of the current table."""
        if self._reader is None:
            return []
        return list(self._reader)

    async def nextset(self) -> bool:
        """Move to the next result table."""
        if self._reader is None:
            return False
        return self._reader.next_result()


class LibSqlBackend:
    """Database protocol on top of a Connection.

    Every statement is its own POST, so ``commit`` has nothing to flush.
    """

    def __init__(self, connection: Connection) -> None:
        """Initialize with an open or openable Connection."""
        self._conn = connection

    @classmethod
    async def create(
        cls,
        connection_string: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> LibSqlBackend:
        """Open a connection and wrap it."""
        conn = await create_connection(connection_string, http_client=http_client)
        logger.debug("LibSQL backend ready at %s", conn.url)
        return cls(conn)

    @property
    def connection(self) -> Connection:
        """Underlying Connection."""
        return self._conn

    def _command(self, sql: str, params: Params) -> Command:
        command = self._conn.create_command(_translate_placeholders(sql))
        for index, value in enumerate(params):
            command.parameters.add_with_value(f"@p{index}", value)
        return command

    async def execute(self, sql: str, params: Params = ()) -> Cursor:
        """Execute a single SQL statement and return a cursor.

        INSERT/UPDATE/DELETE go through the non-query path, so keyed
        updates get their concurrency check; everything else is read.
        """
        command = self._command(sql, params)
        if classify(sql) == OperationKind.OTHER:
            return LibSqlCursor(await command.aexecute_reader())
        return LibSqlCursor(rowcount=await command.aexecute_non_query())

    async def scalar(self, sql: str, params: Params = ()) -> Any:
        """Execute a query and return the first cell of its last result."""
        return await self._command(sql, params).aexecute_scalar()

    async def executemany(self, sql: str, params_seq: list[Params]) -> int:
        """Execute a SQL statement for each set of parameters."""
        total = 0
        for params in params_seq:
            total += await self._command(sql, params).aexecute_non_query()
        return total

    async def executescript(self, sql: str) -> None:
        """Execute multiple SQL statements, one request each."""
        await self._conn.create_command(sql).aexecute_non_query()

    async def commit(self) -> None:
        """No-op: each request is committed by the server."""

    async def close(self) -> None:
        """Close the connection."""
        await self._conn.aclose()
