"""Error taxonomy for the LibSQL HTTP bridge.

Every failure carries an ``ErrorKind`` so callers can branch on the kind
(``err.kind is ErrorKind.CONCURRENCY_VIOLATION``) without inspecting the
exception class. Transport-side errors also carry the SQL text and the raw
request/response bodies: with batched JSON-over-HTTP execution these are the
only practical way to diagnose a failed statement.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Classification of bridge failures."""

    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    CONCURRENCY_VIOLATION = "concurrency_violation"
    OPERATION_CANCELED = "operation_canceled"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    INVALID_STATE = "invalid_state"
    INVALID_CAST = "invalid_cast"
    PARAMETER_NOT_FOUND = "parameter_not_found"


class LibSqlError(Exception):
    """Base error with request/response context."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        sql: str | None = None,
        status_code: int | None = None,
        response_body: str | None = None,
        request_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.sql = sql
        self.status_code = status_code
        self.response_body = response_body
        self.request_body = request_body

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error context, omitting empty fields."""
        result: dict[str, Any] = {"kind": str(self.kind), "message": self.message}
        for key in ("sql", "status_code", "response_body", "request_body"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


class ConfigurationError(LibSqlError):
    """Malformed connection string, missing base address or token."""

    kind = ErrorKind.CONFIGURATION


class TransportError(LibSqlError):
    """HTTP failure, non-success status or unreadable response body."""

    kind = ErrorKind.TRANSPORT


class ProtocolError(TransportError):
    """Embedded error marker or missing field in an otherwise successful response."""

    kind = ErrorKind.PROTOCOL


class ConcurrencyViolationError(LibSqlError):
    """A keyed UPDATE/DELETE matched or changed zero rows."""

    kind = ErrorKind.CONCURRENCY_VIOLATION

    def __init__(
        self,
        message: str,
        *,
        key_value: Any = None,
        expected_version: Any = None,
        sql: str | None = None,
    ) -> None:
        super().__init__(message, sql=sql)
        self.key_value = key_value
        self.expected_version = expected_version


class UnsupportedOperationError(LibSqlError):
    """The operation is never supported by the HTTP transport."""

    kind = ErrorKind.UNSUPPORTED_OPERATION


class InvalidStateError(LibSqlError):
    """Operation called in a state that forbids it (closed, disposed, finished)."""

    kind = ErrorKind.INVALID_STATE


class InvalidCastError(LibSqlError, TypeError):
    """A value cannot be converted to the requested type."""

    kind = ErrorKind.INVALID_CAST


class ParameterNotFoundError(LibSqlError, KeyError):
    """SQL references a placeholder with no bound parameter."""

    kind = ErrorKind.PARAMETER_NOT_FOUND

    def __str__(self) -> str:
        return self.message


class OperationCanceledError(asyncio.CancelledError):
    """Caller-requested cancellation observed while a request was in flight.

    Subclasses ``asyncio.CancelledError`` so task cancellation keeps working,
    while staying distinct from ``TransportError``.
    """

    kind = ErrorKind.OPERATION_CANCELED

    def __init__(self, message: str = "The database operation was canceled.", *, sql: str | None = None):
        super().__init__(message)
        self.message = message
        self.sql = sql
