"""ADO-style client for LibSQL databases over the HTTP pipeline API."""

from libsql_http.db import (
    Command,
    Connection,
    ConnectionString,
    DataReader,
    LibSqlBackend,
    Transaction,
    create_connection,
)
from libsql_http.errors import (
    ConcurrencyViolationError,
    ConfigurationError,
    ErrorKind,
    InvalidCastError,
    InvalidStateError,
    LibSqlError,
    OperationCanceledError,
    ParameterNotFoundError,
    ProtocolError,
    TransportError,
    UnsupportedOperationError,
)
from libsql_http.models import (
    ConnectionState,
    DbType,
    IsolationLevel,
    Parameter,
    ParameterCollection,
    TransactionState,
)

__all__ = [
    "Command",
    "ConcurrencyViolationError",
    "ConfigurationError",
    "Connection",
    "ConnectionState",
    "ConnectionString",
    "DataReader",
    "DbType",
    "ErrorKind",
    "InvalidCastError",
    "InvalidStateError",
    "IsolationLevel",
    "LibSqlBackend",
    "LibSqlError",
    "OperationCanceledError",
    "Parameter",
    "ParameterCollection",
    "ParameterNotFoundError",
    "ProtocolError",
    "Transaction",
    "TransactionState",
    "TransportError",
    "UnsupportedOperationError",
    "create_connection",
]
