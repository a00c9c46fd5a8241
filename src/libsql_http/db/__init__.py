"""Connection, command, reader and transaction over the pipeline endpoint."""

from libsql_http.db.backend import Cursor, Database, Row
from libsql_http.db.command import Command
from libsql_http.db.connection import Connection, create_connection
from libsql_http.db.connection_string import ConnectionString
from libsql_http.db.libsql_backend import LibSqlBackend
from libsql_http.db.reader import DataReader
from libsql_http.db.transaction import Transaction
from libsql_http.db.transport import HttpTransport

__all__ = [
    "Command",
    "Connection",
    "ConnectionString",
    "Cursor",
    "DataReader",
    "Database",
    "HttpTransport",
    "LibSqlBackend",
    "Row",
    "Transaction",
    "create_connection",
]
