"""Run one SQL command against the configured database and print the rows."""

import logging
import sys

from libsql_http.config import get_connection_string, get_log_level, get_timeout
from libsql_http.db.connection import Connection
from libsql_http.db.reader import DataReader
from libsql_http.errors import LibSqlError


def _print_reader(reader: DataReader) -> None:
    while True:
        if reader.field_count:
            print("\t".join(reader.get_name(i) for i in range(reader.field_count)))
            for row in reader:
                print("\t".join("NULL" if value is None else str(value) for value in row))
        if not reader.next_result():
            break
    if reader.records_affected >= 0:
        print(f"({reader.records_affected} row(s) affected)", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Execute the SQL given on the command line; return the exit status."""
    logging.basicConfig(
        level=getattr(logging, get_log_level().upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print('usage: python -m libsql_http "SQL"', file=sys.stderr)
        return 2

    try:
        with Connection(get_connection_string(), default_timeout=get_timeout()) as conn:
            with conn.create_command(" ".join(args)).execute_reader() as reader:
                _print_reader(reader)
    except LibSqlError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
