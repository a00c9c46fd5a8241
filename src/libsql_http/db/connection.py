"""Connection lifecycle and factory."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

import httpx

from libsql_http.config import get_connection_string, get_timeout
from libsql_http.db.command import Command
from libsql_http.db.connection_string import ConnectionString
from libsql_http.db.transaction import Transaction
from libsql_http.db.transport import HttpTransport
from libsql_http.errors import InvalidStateError, UnsupportedOperationError
from libsql_http.models.types import ConnectionState, IsolationLevel

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Connection:
    """A logical connection to a LibSQL database over HTTP.

    Opening a connection does no network I/O; every command is a
    self-contained POST. Commands issued while the connection is closed open
    it first.

    Drive a connection either from async code (``aopen``, ``aexecute_*``) or
    from blocking code (``open``, ``execute_*``), not both: blocking calls
    run on a private event loop owned by the connection.
    """

    database = "LibSQL"
    data_source = "LibSQL HTTP API"
    server_version = "2"

    def __init__(
        self,
        connection_string: str | ConnectionString,
        *,
        http_client: httpx.AsyncClient | None = None,
        default_timeout: float = 30.0,
    ) -> None:
        """Initialize a closed connection; ``http_client`` is shared and never closed here."""
        if isinstance(connection_string, str):
            connection_string = ConnectionString.parse(connection_string)
        self._connection_string = connection_string
        self._http_client = http_client
        self._transport: HttpTransport | None = None
        self._transaction: Transaction | None = None
        self._state = ConnectionState.CLOSED
        self._loop: asyncio.AbstractEventLoop | None = None
        self.default_timeout = default_timeout

    @property
    def connection_string(self) -> str:
        """Connection string in ``<url>;<token>`` form, token included."""
        return self._connection_string.render()

    @property
    def url(self) -> str:
        """Base URL requests are posted to."""
        return self._connection_string.url

    @property
    def state(self) -> ConnectionState:
        """OPEN or CLOSED."""
        return self._state

    @property
    def transaction(self) -> Transaction | None:
        """Most recent transaction, if any."""
        return self._transaction

    def __repr__(self) -> str:
        return f"Connection({self._connection_string.display()!r}, state={self._state!s})"

    # -- lifecycle -------------------------------------------------------

    async def aopen(self) -> None:
        """Open the connection. Idempotent."""
        if self._state == ConnectionState.OPEN:
            return
        self._transport = HttpTransport(self._connection_string, self._http_client)
        self._state = ConnectionState.OPEN
        logger.debug("Opened connection to %s", self._connection_string.display())

    async def aclose(self) -> None:
        """Dispose any transaction and release the HTTP client. Idempotent."""
        if self._transaction is not None:
            self._transaction.dispose()
            self._transaction = None
        if self._state == ConnectionState.CLOSED:
            return
        if self._transport is not None:
            await self._transport.aclose()
            self._transport = None
        self._state = ConnectionState.CLOSED
        logger.debug("Closed connection to %s", self._connection_string.display())

    def open(self) -> None:
        """Blocking form of ``aopen``."""
        self.run_blocking(self.aopen())

    def close(self) -> None:
        """Blocking form of ``aclose``; also closes the private event loop."""
        self.run_blocking(self.aclose())
        if self._loop is not None and not self._loop.is_closed():
            self._loop.close()
        self._loop = None

    async def get_transport(self) -> HttpTransport:
        """Request-ready transport, opening the connection if needed."""
        if self._state != ConnectionState.OPEN or self._transport is None:
            await self.aopen()
        assert self._transport is not None
        return self._transport

    def run_blocking(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run a coroutine to completion on this connection's private loop.

        Raises InvalidStateError when called from inside a running event
        loop; use the ``a``-prefixed coroutine there instead.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            coro.close()
            raise InvalidStateError(
                "Blocking call made from a running event loop; await the async method instead."
            )
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.new_event_loop()
        return self._loop.run_until_complete(coro)

    # -- commands and transactions ----------------------------------------

    def create_command(self, text: str = "", *, transaction: Transaction | None = None) -> Command:
        """New command bound to this connection and its default timeout."""
        return Command(
            self,
            text,
            transaction=transaction or self._active_transaction(),
            timeout=self.default_timeout,
        )

    def _active_transaction(self) -> Transaction | None:
        if self._transaction is not None and self._transaction.is_active:
            return self._transaction
        return None

    def begin_transaction(
        self, isolation_level: IsolationLevel = IsolationLevel.SERIALIZABLE
    ) -> Transaction:
        """Start a local transaction, disposing any previous one.

        See Transaction for why this provides no atomicity across requests.
        """
        if self._transaction is not None:
            self._transaction.dispose()
        self._transaction = Transaction(self, isolation_level)
        logger.debug("Began transaction %s", self._transaction.transaction_id)
        return self._transaction

    async def abegin_transaction(
        self, isolation_level: IsolationLevel = IsolationLevel.SERIALIZABLE
    ) -> Transaction:
        """Async form of ``begin_transaction``."""
        return self.begin_transaction(isolation_level)

    def change_database(self, name: str) -> None:
        """Always raises UnsupportedOperationError; the URL selects the database."""
        raise UnsupportedOperationError(
            f"Changing the database to '{name}' is not supported over HTTP."
        )

    def read_only(self) -> Connection:
        """New, closed connection to the same database in read-only mode."""
        return Connection(
            self._connection_string.read_only(),
            http_client=self._http_client,
            default_timeout=self.default_timeout,
        )

    # -- context managers ------------------------------------------------

    def __enter__(self) -> Connection:
        """Open the connection for a ``with`` block."""
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Close the connection."""
        self.close()

    async def __aenter__(self) -> Connection:
        """Open the connection for an ``async with`` block."""
        await self.aopen()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close the connection."""
        await self.aclose()


async def create_connection(
    connection_string: str | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    default_timeout: float | None = None,
) -> Connection:
    """Create and open a connection.

    Without a connection string, LIBSQL_URL and LIBSQL_AUTH_TOKEN are used;
    the timeout defaults to LIBSQL_TIMEOUT.
    """
    conn = Connection(
        connection_string or get_connection_string(),
        http_client=http_client,
        default_timeout=get_timeout() if default_timeout is None else default_timeout,
    )
    await conn.aopen()
    return conn
