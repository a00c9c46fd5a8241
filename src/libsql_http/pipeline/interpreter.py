"""Turn pipeline responses into affected-row counts, scalars and tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from libsql_http.codec.dates import parse_datetime
from libsql_http.codec.values import decode_cell
from libsql_http.errors import ConcurrencyViolationError, ProtocolError
from libsql_http.models.wire import PipelineEntry, PipelineResponse, StatementResult
from libsql_http.pipeline.batch import RequestBatch, RequestRole
from libsql_http.pipeline.table import ResultColumn, ResultTable, column_type
from libsql_http.sql.splitter import OperationKind

logger = logging.getLogger(__name__)

_MODIFYING = (OperationKind.UPDATE, OperationKind.DELETE)


@dataclass
class PipelineReply:
    """A parsed response together with the raw bodies it came from."""

    response: PipelineResponse
    body: str = ""
    request_body: str = ""
    status_code: int = 200


def _protocol_error(message: str, batch: RequestBatch, reply: PipelineReply) -> ProtocolError:
    return ProtocolError(
        message,
        sql=batch.sql,
        status_code=reply.status_code,
        response_body=reply.body,
        request_body=reply.request_body,
    )


def _entry(batch: RequestBatch, reply: PipelineReply, role: RequestRole) -> PipelineEntry | None:
    index = batch.index_of(role)
    if index is None or index >= len(reply.response.results):
        return None
    return reply.response.results[index]


def _first_int(entry: PipelineEntry | None) -> int | None:
    """Integer in the first cell of an entry's result, if there is one."""
    if entry is None or entry.result is None or not entry.result.rows:
        return None
    value = decode_cell(entry.result.first_cell)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _not_found_message(batch: RequestBatch) -> str:
    if batch.expected_version is not None:
        return (
            f"The record with ID '{batch.key_value}' and version "
            f"{batch.expected_version} was not found."
        )
    return f"The record with ID '{batch.key_value}' was not found."


def interpret_non_query(batch: RequestBatch, reply: PipelineReply) -> int:
    """Affected-row count of a modification batch.

    A keyed UPDATE/DELETE whose existence check counts zero rows, or whose
    ``changes()`` is zero, raises ConcurrencyViolationError. The existence
    check is evaluated first. An UPDATE/DELETE whose table could not be
    resolved carries no changes result and reports 0. INSERT and other
    statements report the main statement's own affected count.
    """
    if batch.main_kind in _MODIFYING:
        if _first_int(_entry(batch, reply, RequestRole.VERIFY)) == 0:
            logger.info("Concurrency violation: key %r not found", batch.key_value)
            raise ConcurrencyViolationError(
                _not_found_message(batch),
                key_value=batch.key_value,
                expected_version=batch.expected_version,
                sql=batch.sql,
            )

        changes_entry = _entry(batch, reply, RequestRole.CHANGES)
        if changes_entry is not None:
            changes = _first_int(changes_entry)
            if changes is None:
                return 0
            if changes == 0 and batch.keyed:
                logger.info("Concurrency violation: key %r changed no rows", batch.key_value)
                raise ConcurrencyViolationError(
                    f"The record with ID '{batch.key_value}' was modified or deleted "
                    "by another process.",
                    key_value=batch.key_value,
                    expected_version=batch.expected_version,
                    sql=batch.sql,
                )
            return changes

        # Unresolved table: no changes() to consult
        return 0

    main = _entry(batch, reply, RequestRole.MAIN)
    if main is None or main.result is None:
        return 0
    return main.result.affected_row_count


def interpret_scalar(batch: RequestBatch, reply: PipelineReply) -> Any:
    """First cell of the last rows-bearing result.

    Falls back to the affected count of the last INSERT/UPDATE/DELETE. When
    nothing yields a value and the SQL is a ``COUNT(*)`` or ``sqlite_master``
    lookup, the result is 0 so existence checks read as "none".
    """
    last_rows: StatementResult | None = None
    affected: int | None = None

    for index, entry in enumerate(reply.response.results):
        result = entry.result
        if result is None:
            continue
        if result.rows:
            last_rows = result
        elif batch.kind_at(index) != OperationKind.OTHER:
            affected = result.affected_row_count

    value: Any = None
    if last_rows is not None:
        try:
            value = decode_cell(last_rows.first_cell)
        except ValueError as exc:
            raise _protocol_error(
                f"Error parsing scalar value: {exc}", batch, reply
            ) from exc
    elif affected is not None:
        value = affected

    if value is None and ("COUNT(*)" in batch.sql or "sqlite_master" in batch.sql):
        return 0
    return value


def _unique_columns(result: StatementResult) -> list[ResultColumn]:
    columns: list[ResultColumn] = []
    seen: set[str] = set()
    for position, col in enumerate(result.cols):
        base = col.name or f"Column{position}"
        name = base
        suffix = 1
        while name.lower() in seen:
            name = f"{base}_{suffix}"
            suffix += 1
        seen.add(name.lower())
        columns.append(ResultColumn(name, column_type(col.decltype), col.decltype))
    return columns


def _coerce(value: Any, column: ResultColumn) -> Any:
    """Apply the declared column type to a decoded cell."""
    if value is None:
        return None
    target = column.python_type
    if target is int and isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    if target is int and isinstance(value, float) and value.is_integer():
        return int(value)
    if target is float and isinstance(value, int | str):
        try:
            return float(value)
        except ValueError:
            return None
    if target is datetime and isinstance(value, str):
        try:
            return parse_datetime(value)
        except ValueError:
            return None
    return value


def _build_table(result: StatementResult, batch: RequestBatch, reply: PipelineReply) -> ResultTable:
    columns = _unique_columns(result)
    rows: list[tuple[Any, ...]] = []
    for raw_row in result.rows:
        values = []
        for ordinal, column in enumerate(columns):
            cell = raw_row[ordinal] if ordinal < len(raw_row) else None
            try:
                values.append(_coerce(decode_cell(cell), column))
            except ValueError as exc:
                raise _protocol_error(
                    f"Error parsing column value at index {ordinal}: {exc}", batch, reply
                ) from exc
        rows.append(tuple(values))
    return ResultTable(columns=columns, rows=rows)


def build_result_tables(
    batch: RequestBatch, reply: PipelineReply
) -> tuple[list[ResultTable], int]:
    """Result tables for every column-bearing result, plus records affected.

    Records affected sums the affected counts of results without columns and
    is -1 when there were none. An empty ``results`` array yields a single
    ``Value`` column holding 0.
    """
    if not reply.response.results:
        return [ResultTable.single_value("Value", 0)], -1

    tables: list[ResultTable] = []
    affected = -1
    for entry in reply.response.results:
        result = entry.result
        if result is None:
            continue
        if result.cols:
            tables.append(_build_table(result, batch, reply))
        else:
            affected = max(affected, 0) + result.affected_row_count
    return tables, affected
