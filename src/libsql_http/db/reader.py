"""Forward-only reader over buffered result tables."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from libsql_http.codec.dates import (
    format_datetime,
    julian_to_datetime,
    parse_datetime,
    parse_datetime_offset,
    parse_timedelta,
    unix_to_datetime,
)
from libsql_http.codec.values import to_bool, to_guid
from libsql_http.errors import InvalidCastError, InvalidStateError
from libsql_http.pipeline.table import ResultColumn, ResultTable

_INT_BOUNDS = {
    16: (-(2**15), 2**15 - 1),
    32: (-(2**31), 2**31 - 1),
    64: (-(2**63), 2**63 - 1),
}


def _cast_error(value: Any, target: str) -> InvalidCastError:
    return InvalidCastError(
        f"Unable to convert value of type '{type(value).__name__}' ({value!r}) to {target}."
    )


class Row:
    """A result row supporting both named and positional access."""

    __slots__ = ("_table", "_values")

    def __init__(self, table: ResultTable, values: tuple[Any, ...]) -> None:
        """Initialize with the owning table and the row's decoded values."""
        self._table = table
        self._values = values

    def __getitem__(self, key: str | int) -> Any:
        """Get a cell by column name or ordinal."""
        if isinstance(key, str):
            return self._values[self._table.ordinal(key)]
        return self._values[key]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def keys(self) -> list[str]:
        """Return the column names of the row's table."""
        return self._table.names

    def as_dict(self) -> dict[str, Any]:
        """Return the row as a column-name to value mapping."""
        return dict(zip(self._table.names, self._values, strict=True))

    def __repr__(self) -> str:
        return f"Row({self.as_dict()!r})"


class DataReader:
    """Reads rows from one or more result tables, one table at a time.

    ``read()`` advances to the next row of the current table and
    ``next_result()`` moves to the next table. Typed getters raise
    InvalidCastError for NULL cells and for values that cannot be
    converted; ``get_value`` returns None for NULL.
    """

    def __init__(self, tables: list[ResultTable], records_affected: int = -1) -> None:
        """Initialize positioned before the first row of the first table."""
        self._tables = tables
        self._table_index = 0
        self._row_index = -1
        self._closed = False
        self.records_affected = records_affected

    # -- navigation ----------------------------------------------------

    @property
    def _table(self) -> ResultTable | None:
        if self._table_index < len(self._tables):
            return self._tables[self._table_index]
        return None

    @property
    def depth(self) -> int:
        """Nesting depth; always 0."""
        return 0

    @property
    def is_closed(self) -> bool:
        """True once ``close`` has been called."""
        return self._closed

    @property
    def columns(self) -> list[ResultColumn]:
        """Columns of the current result table; empty past the last one."""
        table = self._table
        return list(table.columns) if table is not None else []

    @property
    def field_count(self) -> int:
        """Number of columns in the current table."""
        table = self._table
        return len(table.columns) if table is not None else 0

    @property
    def has_rows(self) -> bool:
        """True if the current table has at least one row."""
        table = self._table
        return table is not None and bool(table.rows)

    def _ensure_open(self) -> None:
        if self._closed:
            raise InvalidStateError("The reader is closed.")

    def read(self) -> bool:
        """Advance to the next row; False once the current table is exhausted."""
        self._ensure_open()
        table = self._table
        if table is None:
            return False
        if self._row_index < len(table.rows):
            self._row_index += 1
        return self._row_index < len(table.rows)

    def next_result(self) -> bool:
        """Move to the next result table."""
        self._ensure_open()
        if self._table_index < len(self._tables):
            self._table_index += 1
        self._row_index = -1
        return self._table_index < len(self._tables)

    def close(self) -> None:
        """Close the reader; later reads raise InvalidStateError."""
        self._closed = True

    def __enter__(self) -> DataReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[Row]:
        """Remaining rows of the current table."""
        while self.read():
            yield Row(self._require_table(), self._current())

    def _require_table(self) -> ResultTable:
        table = self._table
        if table is None:
            raise InvalidStateError("The reader has no current result.")
        return table

    def _current(self) -> tuple[Any, ...]:
        self._ensure_open()
        table = self._require_table()
        if not 0 <= self._row_index < len(table.rows):
            raise InvalidStateError("No current row; call read() first.")
        return table.rows[self._row_index]

    # -- schema ----------------------------------------------------------

    def get_name(self, ordinal: int) -> str:
        """Return the name of the column at ``ordinal``."""
        return self._require_table().columns[ordinal].name

    def get_ordinal(self, name: str) -> int:
        """Return the ordinal of ``name``, matching exactly then case-insensitively."""
        return self._require_table().ordinal(name)

    def get_field_type(self, ordinal: int) -> type:
        """Return the Python type declared for the column at ``ordinal``."""
        return self._require_table().columns[ordinal].python_type

    def get_data_type_name(self, ordinal: int) -> str:
        """Return the declared SQL type, or the Python type name without one."""
        column = self._require_table().columns[ordinal]
        return column.decltype or column.python_type.__name__

    # -- values ----------------------------------------------------------

    def get_value(self, ordinal: int) -> Any:
        """Cell value at ``ordinal``; None for NULL."""
        return self._current()[ordinal]

    def get_values(self) -> tuple[Any, ...]:
        """Return every cell of the current row."""
        return self._current()

    def __getitem__(self, key: str | int) -> Any:
        if isinstance(key, str):
            key = self.get_ordinal(key)
        return self.get_value(key)

    def is_null(self, ordinal: int) -> bool:
        """True if the cell at ``ordinal`` is NULL."""
        return self.get_value(ordinal) is None

    def _non_null(self, ordinal: int, target: str) -> Any:
        value = self.get_value(ordinal)
        if value is None:
            raise InvalidCastError(
                f"Column {ordinal} ('{self.get_name(ordinal)}') is NULL and cannot be read as {target}."
            )
        return value

    def _integer(self, ordinal: int, bits: int) -> int:
        target = f"a {bits}-bit integer"
        value = self._non_null(ordinal, target)
        if isinstance(value, bool):
            result = int(value)
        elif isinstance(value, int):
            result = value
        elif isinstance(value, float) and value.is_integer():
            result = int(value)
        elif isinstance(value, str):
            try:
                result = int(value.strip())
            except ValueError as exc:
                raise _cast_error(value, target) from exc
        else:
            raise _cast_error(value, target)
        low, high = _INT_BOUNDS[bits]
        if not low <= result <= high:
            raise _cast_error(value, target)
        return result

    def get_boolean(self, ordinal: int) -> bool:
        """Read a cell as bool; integers, floats and "true"/"1" text are accepted."""
        return to_bool(self._non_null(ordinal, "bool"))

    def get_byte(self, ordinal: int) -> int:
        """Read a cell as an unsigned 8-bit integer."""
        value = self._integer(ordinal, 16)
        if not 0 <= value <= 255:
            raise _cast_error(value, "a byte")
        return value

    def get_int16(self, ordinal: int) -> int:
        """Read a cell as a range-checked 16-bit integer."""
        return self._integer(ordinal, 16)

    def get_int32(self, ordinal: int) -> int:
        """Read a cell as a range-checked 32-bit integer."""
        return self._integer(ordinal, 32)

    def get_int64(self, ordinal: int) -> int:
        """Read a cell as a range-checked 64-bit integer."""
        return self._integer(ordinal, 64)

    def get_double(self, ordinal: int) -> float:
        """Read a cell as float."""
        value = self._non_null(ordinal, "float")
        if isinstance(value, bytes | bytearray):
            raise _cast_error(value, "float")
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise _cast_error(value, "float") from exc

    get_float = get_double

    def get_decimal(self, ordinal: int) -> Decimal:
        """Read a cell as Decimal via its text form."""
        value = self._non_null(ordinal, "Decimal")
        if not isinstance(value, int | float | str | Decimal) or isinstance(value, bool):
            raise _cast_error(value, "Decimal")
        try:
            return Decimal(str(value))
        except InvalidOperation as exc:
            raise _cast_error(value, "Decimal") from exc

    def get_string(self, ordinal: int) -> str:
        """Text form of a cell; NULL reads as an empty string."""
        value = self.get_value(ordinal)
        if value is None:
            return ""
        if isinstance(value, datetime):
            return format_datetime(value)
        if isinstance(value, bytes | bytearray):
            return bytes(value).decode("utf-8", errors="replace")
        return str(value)

    def get_char(self, ordinal: int) -> str:
        """Read the first character of a cell's text form."""
        value = self.get_string(ordinal)
        if not value:
            raise _cast_error(value, "a character")
        return value[0]

    def get_guid(self, ordinal: int) -> uuid.UUID:
        """UUID from GUID text or 16-byte binary; NULL reads as the nil UUID."""
        value = self.get_value(ordinal)
        if value is None:
            return uuid.UUID(int=0)
        try:
            return to_guid(value)
        except ValueError as exc:
            raise InvalidCastError(f"Unrecognized Guid format value: {value!r}") from exc

    def get_datetime(self, ordinal: int) -> datetime:
        """Naive datetime from text, unix seconds or a Julian day number."""
        value = self._non_null(ordinal, "datetime")
        if isinstance(value, datetime):
            return value.replace(tzinfo=None)
        if isinstance(value, str):
            try:
                return parse_datetime(value)
            except ValueError as exc:
                raise _cast_error(value, "datetime") from exc
        if isinstance(value, bool):
            raise _cast_error(value, "datetime")
        if isinstance(value, int):
            return unix_to_datetime(value)
        if isinstance(value, float):
            return julian_to_datetime(value)
        raise _cast_error(value, "datetime")

    def get_datetime_offset(self, ordinal: int) -> datetime:
        """Aware datetime; values without an offset are taken as UTC."""
        value = self._non_null(ordinal, "datetime")
        if isinstance(value, datetime):
            return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
        if isinstance(value, str):
            try:
                return parse_datetime_offset(value)
            except ValueError as exc:
                raise _cast_error(value, "datetime") from exc
        if isinstance(value, int) and not isinstance(value, bool):
            return unix_to_datetime(value).replace(tzinfo=UTC)
        raise _cast_error(value, "datetime")

    def get_timedelta(self, ordinal: int) -> timedelta:
        """Read a cell as timedelta from ``[d.]HH:MM:SS[.ffffff]`` text."""
        value = self._non_null(ordinal, "timedelta")
        if isinstance(value, timedelta):
            return value
        if isinstance(value, str):
            try:
                return parse_timedelta(value)
            except ValueError as exc:
                raise _cast_error(value, "timedelta") from exc
        raise _cast_error(value, "timedelta")

    def get_bytes(self, ordinal: int) -> bytes:
        """Blob contents; NULL reads as empty bytes."""
        value = self.get_value(ordinal)
        if value is None:
            return b""
        if isinstance(value, bytes | bytearray):
            return bytes(value)
        raise _cast_error(value, "bytes")
