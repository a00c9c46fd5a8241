"""Declared parameter types and state enums."""

import datetime as dt
import uuid
from decimal import Decimal
from enum import StrEnum


class DbType(StrEnum):
    """Declared type of a bound parameter."""

    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    DOUBLE = "double"
    DECIMAL = "decimal"
    STRING = "string"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    DATETIME_OFFSET = "datetime_offset"
    TIME = "time"
    GUID = "guid"
    BINARY = "binary"
    OBJECT = "object"
    NULL = "null"


class ConnectionState(StrEnum):
    """Lifecycle state of a connection."""

    CLOSED = "closed"
    OPEN = "open"


class TransactionState(StrEnum):
    """Lifecycle state of a transaction. COMMITTED and ROLLED_BACK are terminal."""

    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class IsolationLevel(StrEnum):
    """Requested isolation level, recorded on the transaction only."""

    UNSPECIFIED = "unspecified"
    READ_UNCOMMITTED = "read_uncommitted"
    READ_COMMITTED = "read_committed"
    REPEATABLE_READ = "repeatable_read"
    SERIALIZABLE = "serializable"
    SNAPSHOT = "snapshot"


def infer_db_type(value: object) -> DbType:
    """Infer a declared type from a Python value."""
    if value is None:
        return DbType.NULL
    # bool is an int subclass; check it first
    if isinstance(value, bool):
        return DbType.BOOLEAN
    if isinstance(value, int):
        return DbType.INT64
    if isinstance(value, float):
        return DbType.DOUBLE
    if isinstance(value, Decimal):
        return DbType.DECIMAL
    if isinstance(value, str):
        return DbType.STRING
    if isinstance(value, dt.datetime):
        return DbType.DATETIME_OFFSET if value.tzinfo is not None else DbType.DATETIME
    if isinstance(value, dt.date):
        return DbType.DATETIME
    if isinstance(value, dt.time | dt.timedelta):
        return DbType.TIME
    if isinstance(value, uuid.UUID):
        return DbType.GUID
    if isinstance(value, bytes | bytearray | memoryview):
        return DbType.BINARY
    return DbType.OBJECT
