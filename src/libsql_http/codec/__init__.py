"""Value codec: Python values to tagged wire values and back."""

from libsql_http.codec.dates import format_datetime, format_datetime_offset, parse_datetime
from libsql_http.codec.values import (
    decode_cell,
    decode_value,
    encode_parameter,
    encode_value,
    to_bool,
    to_guid,
)

__all__ = [
    "decode_cell",
    "decode_value",
    "encode_parameter",
    "encode_value",
    "format_datetime",
    "format_datetime_offset",
    "parse_datetime",
    "to_bool",
    "to_guid",
]
