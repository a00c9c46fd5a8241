"""Async facade protocols over a libSQL connection.

Application code that prefers cursor-style ``execute``/``fetchall`` calls
with ``?`` placeholders programs against these protocols instead of
building commands and readers by hand. Failures surface as the
``LibSqlError`` hierarchy from ``libsql_http.errors``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from libsql_http.pipeline.table import ResultColumn

Params = tuple[Any, ...] | list[Any]


@runtime_checkable
class Row(Protocol):
    """One row of a result table, addressable by column name or ordinal."""

    def __getitem__(self, key: str | int) -> Any:
        """Get a cell by column name (case-insensitive fallback) or ordinal."""
        ...

    def keys(self) -> list[str]:
        """Return the de-duplicated column names of the row's table."""
        ...

    def as_dict(self) -> dict[str, Any]:
        """Return the row as a column-name to value mapping."""
        ...


@runtime_checkable
class Cursor(Protocol):
    """Buffered result of one ``Database.execute`` call.

    A pipeline can return several result tables; the cursor starts on the
    first and ``nextset`` moves to the next one.
    """

    @property
    def description(self) -> list[ResultColumn]:
        """Columns of the current result table; empty for modifications."""
        ...

    @property
    def rowcount(self) -> int:
        """Rows affected by the statement, or -1 when it modified nothing."""
        ...

    async def fetchone(self) -> Row | None:
        """Fetch the next row of the current table, or None if exhausted."""
        ...

    async def fetchall(self) -> list[Row]:
        """Fetch the remaining rows of the current table."""
        ...

    async def nextset(self) -> bool:
        """Move to the next result table; False when there is none."""
        ...


@runtime_checkable
class Database(Protocol):
    """Async libSQL database facade.

    SQL uses ``?`` placeholders; the backend translates them to the named
    ``@pN`` form the pipeline binds. Every call is its own HTTP request, so
    there is no transaction spanning calls.
    """

    async def execute(self, sql: str, params: Params = ()) -> Cursor:
        """Execute a single statement and return a cursor.

        A keyed UPDATE/DELETE (``WHERE "Id" = ?``) whose row is missing or
        unchanged raises ConcurrencyViolationError. Transport failures raise
        TransportError and server-side SQL errors raise ProtocolError.
        """
        ...

    async def scalar(self, sql: str, params: Params = ()) -> Any:
        """Execute a query and return the first cell of its last result."""
        ...

    async def executemany(self, sql: str, params_seq: list[Params]) -> int:
        """Execute a statement for each parameter set; return total rows affected."""
        ...

    async def executescript(self, sql: str) -> None:
        """Execute ``;``-separated statements, one request each."""
        ...

    async def commit(self) -> None:
        """Commit pending work; a no-op where the server auto-commits."""
        ...

    async def close(self) -> None:
        """Close the underlying connection."""
        ...
