"""Conversion between Python values and tagged wire values.

Encoding follows the parameter's declared ``DbType``. Decoding is permissive:
structured values that fail to parse (numbers, dates, GUIDs) become ``None``
rather than raising. Malformed Base64 is the exception and raises
``ValueError``, since a blob that cannot be decoded is corrupt rather than
merely ambiguous.
"""

from __future__ import annotations

import base64
import binascii
import uuid
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING, Any

from libsql_http.codec.dates import (
    format_datetime,
    format_datetime_offset,
    format_timedelta,
    parse_datetime,
    parse_datetime_offset,
    parse_timedelta,
)
from libsql_http.errors import InvalidCastError
from libsql_http.models.types import DbType
from libsql_http.models.wire import (
    BlobValue,
    FloatValue,
    IntegerValue,
    NullValue,
    TextValue,
    WireValue,
)

if TYPE_CHECKING:
    from libsql_http.models.parameters import Parameter

_INTEGER_TYPES = frozenset({DbType.INT16, DbType.INT32, DbType.INT64})
_FLOAT_TYPES = frozenset({DbType.DOUBLE, DbType.DECIMAL})


def _cast_error(value: object, target: str) -> InvalidCastError:
    return InvalidCastError(
        f"Unable to cast object of type '{type(value).__name__}' to type '{target}'."
    )


def encode_parameter(parameter: Parameter) -> WireValue:
    """Encode a bound parameter as a wire value."""
    return encode_value(parameter.value, parameter.db_type, name=parameter.name)


def encode_value(value: Any, db_type: DbType, *, name: str | None = None) -> WireValue:
    """Encode a Python value according to its declared type.

    Raises InvalidCastError when the value cannot represent the declared type.
    """
    if value is None:
        return NullValue(name=name)

    if db_type == DbType.BOOLEAN:
        return IntegerValue(name=name, value="1" if to_bool(value) else "0")

    if db_type in _INTEGER_TYPES:
        try:
            return IntegerValue(name=name, value=str(int(value)))
        except (TypeError, ValueError) as exc:
            raise _cast_error(value, "int") from exc

    if db_type in _FLOAT_TYPES:
        try:
            return FloatValue(name=name, value=float(value))
        except (TypeError, ValueError) as exc:
            raise _cast_error(value, "float") from exc

    if db_type == DbType.DATETIME:
        if isinstance(value, str):
            try:
                value = parse_datetime(value)
            except ValueError as exc:
                raise InvalidCastError(
                    f"Unable to parse string '{value}' as a valid datetime."
                ) from exc
        if not isinstance(value, date):
            raise _cast_error(value, "datetime")
        return TextValue(name=name, value=format_datetime(value))

    if db_type == DbType.DATETIME_OFFSET:
        if isinstance(value, str):
            try:
                value = parse_datetime_offset(value)
            except ValueError as exc:
                raise InvalidCastError(
                    f"Unable to parse string '{value}' as a valid datetime offset."
                ) from exc
        if not isinstance(value, datetime):
            raise _cast_error(value, "datetime")
        return TextValue(name=name, value=format_datetime_offset(value))

    if db_type == DbType.TIME:
        if isinstance(value, str):
            try:
                value = parse_timedelta(value)
            except ValueError as exc:
                raise _cast_error(value, "timedelta") from exc
        if not isinstance(value, timedelta | time):
            raise _cast_error(value, "timedelta")
        return TextValue(name=name, value=format_timedelta(value))

    if db_type == DbType.GUID:
        if isinstance(value, bytes | bytearray) and len(value) == 16:
            value = uuid.UUID(bytes_le=bytes(value))
        # strings keep the caller's casing
        return TextValue(name=name, value=str(value))

    if db_type == DbType.BINARY:
        if not isinstance(value, bytes | bytearray | memoryview):
            raise _cast_error(value, "bytes")
        return BlobValue(name=name, value=base64.b64encode(bytes(value)).decode("ascii"))

    if db_type == DbType.STRING:
        return TextValue(name=name, value=str(value))

    # OBJECT, NULL-with-a-value and anything unrecognized
    return TextValue(name=name, value=str(value))


def _parse_int(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def _parse_float(raw: Any) -> float | None:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def decode_value(wire_type: str | None, raw: Any, expected: type | None = None) -> Any:
    """Decode a raw wire value into a Python value, or None.

    ``expected`` names the type the consumer wants (``bool``, ``uuid.UUID``,
    ``datetime``); when given, the decoded value is coerced permissively and
    failures yield None.
    """
    kind = (wire_type or "").lower()
    if kind == "null" or raw is None or raw == "":
        return None

    if kind == "integer":
        value: Any = _parse_int(raw)
    elif kind == "float":
        value = _parse_float(raw)
    elif kind == "blob":
        try:
            value = base64.b64decode(raw, validate=True)
        except (binascii.Error, TypeError) as exc:
            raise ValueError(f"Malformed Base64 blob value: {exc}") from exc
    elif kind == "text":
        value = raw if isinstance(raw, str) else str(raw)
    else:
        value = raw

    if expected is None or value is None:
        return value
    if expected is bool:
        return to_bool(value)
    if expected is uuid.UUID:
        try:
            return to_guid(value)
        except ValueError:
            return None
    if expected is datetime:
        if isinstance(value, str):
            try:
                return parse_datetime(value)
            except ValueError:
                return None
        return None
    return value


def decode_cell(cell: Any, expected: type | None = None) -> Any:
    """Decode one ``{"type", "value"}`` cell from a result row.

    Blob cells may carry their payload under ``base64`` instead of ``value``.
    Anything that is not an object decodes to None.
    """
    if not isinstance(cell, dict):
        return None
    wire_type = cell.get("type")
    raw = cell.get("value")
    if raw is None and wire_type == "blob":
        raw = cell.get("base64")
    return decode_value(wire_type, raw, expected)


def to_bool(value: Any) -> bool:
    """Interpret a stored value as a boolean: nonzero numbers, ``"1"`` and ``"true"``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return value != 0
    if isinstance(value, str):
        return value == "1" or value.lower() == "true"
    return bool(value)


def to_guid(value: Any) -> uuid.UUID:
    """Interpret a stored value as a UUID.

    Accepts UUIDs, GUID text in any case and 16-byte little-endian binary
    GUIDs. Empty text is the nil UUID. Raises ValueError otherwise.
    """
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, bytes | bytearray):
        if len(value) == 16:
            return uuid.UUID(bytes_le=bytes(value))
        value = bytes(value).decode("utf-8")
    if not isinstance(value, str):
        raise ValueError(f"Unrecognized GUID value of type '{type(value).__name__}'")
    if not value:
        return uuid.UUID(int=0)
    return uuid.UUID(value)
