"""SQL commands executed over the pipeline endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from libsql_http.db.reader import DataReader
from libsql_http.errors import InvalidStateError, UnsupportedOperationError
from libsql_http.models.parameters import Parameter, ParameterCollection
from libsql_http.models.types import DbType
from libsql_http.pipeline.batch import RequestBatch, build_modification_batch, build_pipeline
from libsql_http.pipeline.interpreter import (
    build_result_tables,
    interpret_non_query,
    interpret_scalar,
)
from libsql_http.sql.splitter import (
    ClassifyPolicy,
    classify,
    classify_each,
    split_statements,
)

if TYPE_CHECKING:
    from libsql_http.db.connection import Connection
    from libsql_http.db.transaction import Transaction

logger = logging.getLogger(__name__)


class Command:
    """SQL text plus ``@name`` parameters, bound to a connection.

    ``execute_non_query`` sends one POST per statement so each keyed
    UPDATE/DELETE gets its own concurrency check. ``execute_scalar`` and
    ``execute_reader`` send every statement in a single POST. Each method
    has an ``a``-prefixed coroutine twin; the plain methods block on it.
    """

    def __init__(
        self,
        connection: Connection,
        text: str = "",
        *,
        transaction: Transaction | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize with a connection, SQL text and an optional transaction."""
        self.connection = connection
        self.text = text
        self.transaction = transaction
        self.timeout = timeout
        self.parameters = ParameterCollection()

    def create_parameter(
        self, name: str | None = None, value: Any = None, db_type: DbType | None = None
    ) -> Parameter:
        """New parameter; it is not added to ``parameters``."""
        return Parameter(name, value, db_type)

    def prepare(self) -> None:
        """No-op: statements are not prepared server-side."""

    def cancel(self) -> None:
        """Not supported; cancel the awaiting task instead."""
        raise UnsupportedOperationError(
            "Command cancellation is not supported; cancel the awaiting task instead."
        )

    def _request_timeout(self) -> float | None:
        return self.timeout if self.timeout > 0 else None

    def _pipeline_batch(self) -> RequestBatch:
        statements = split_statements(self.text)
        if not statements:
            raise InvalidStateError("Command text is empty.", sql=self.text)
        kinds = classify_each(statements, ClassifyPolicy.PREFIX)
        return build_pipeline(statements, kinds, self.parameters, sql=self.text)

    async def aexecute_non_query(self) -> int:
        """Execute each statement in its own batch; return total rows affected.

        Empty or whitespace-only text returns 0 without a request.
        """
        if not self.text or not self.text.strip():
            return 0
        transport = await self.connection.get_transport()
        total = 0
        for statement in split_statements(self.text):
            kind = classify(statement, ClassifyPolicy.CONTAINS)
            batch = build_modification_batch(kind, statement, self.parameters)
            reply = await transport.post(batch, timeout=self._request_timeout())
            affected = interpret_non_query(batch, reply)
            logger.debug("%s affected %d row(s)", kind, affected)
            total += affected
        return total

    async def aexecute_scalar(self) -> Any:
        """First column of the first row of the last rows-bearing result."""
        batch = self._pipeline_batch()
        transport = await self.connection.get_transport()
        reply = await transport.post(batch, timeout=self._request_timeout())
        return interpret_scalar(batch, reply)

    async def aexecute_reader(self) -> DataReader:
        """Buffered reader over every column-bearing result."""
        batch = self._pipeline_batch()
        transport = await self.connection.get_transport()
        reply = await transport.post(batch, timeout=self._request_timeout())
        tables, records_affected = build_result_tables(batch, reply)
        return DataReader(tables, records_affected)

    def execute_non_query(self) -> int:
        """Blocking form of ``aexecute_non_query``."""
        return self.connection.run_blocking(self.aexecute_non_query())

    def execute_scalar(self) -> Any:
        """Blocking form of ``aexecute_scalar``."""
        return self.connection.run_blocking(self.aexecute_scalar())

    def execute_reader(self) -> DataReader:
        """Blocking form of ``aexecute_reader``."""
        return self.connection.run_blocking(self.aexecute_reader())

    def __repr__(self) -> str:
        return f"Command(text={self.text!r}, parameters={len(self.parameters)})"
