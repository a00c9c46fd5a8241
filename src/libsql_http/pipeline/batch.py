"""Build pipeline request batches from commands.

A batch is the JSON body of one POST: a list of ``execute`` requests,
normally followed by a ``close``. Each request carries a role so the
response interpreter can find the verification, main, changes and refresh
results by position.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from libsql_http.codec.values import encode_parameter
from libsql_http.errors import ParameterNotFoundError
from libsql_http.models.parameters import ParameterCollection
from libsql_http.models.wire import (
    CloseRequest,
    ExecuteRequest,
    PipelineBody,
    Statement,
)
from libsql_http.sql.splitter import (
    OperationKind,
    find_key_predicate,
    quote_table_name,
    rewrite_placeholders,
)

_CHANGES_SQL = "SELECT changes();"


class RequestRole(StrEnum):
    """What a request in a batch is for."""

    VERIFY = "verify"
    MAIN = "main"
    CHANGES = "changes"
    REFRESH = "refresh"
    CLOSE = "close"


class RequestBatch:
    """Ordered pipeline requests plus their roles and operation kinds."""

    def __init__(self, sql: str) -> None:
        self.sql = sql
        self.body = PipelineBody()
        self.roles: list[RequestRole] = []
        self.kinds: list[OperationKind] = []
        self.key_value: Any = None
        self.expected_version: Any = None

    def __len__(self) -> int:
        return len(self.roles)

    @property
    def keyed(self) -> bool:
        """True when the main statement is identified by an ``"Id"`` value."""
        return RequestRole.VERIFY in self.roles

    def add_execute(
        self,
        stmt: Statement,
        role: RequestRole = RequestRole.MAIN,
        kind: OperationKind = OperationKind.OTHER,
    ) -> None:
        self.body.requests.append(ExecuteRequest(stmt=stmt))
        self.roles.append(role)
        self.kinds.append(kind)

    def add_close(self) -> None:
        self.body.requests.append(CloseRequest())
        self.roles.append(RequestRole.CLOSE)
        self.kinds.append(OperationKind.OTHER)

    def index_of(self, role: RequestRole) -> int | None:
        """Position of the first request with this role."""
        try:
            return self.roles.index(role)
        except ValueError:
            return None

    def kind_at(self, index: int) -> OperationKind:
        """Operation kind at ``index``; OTHER past the end of the batch."""
        return self.kinds[index] if index < len(self.kinds) else OperationKind.OTHER

    @property
    def main_kind(self) -> OperationKind:
        index = self.index_of(RequestRole.MAIN)
        return OperationKind.OTHER if index is None else self.kinds[index]

    def to_json(self) -> str:
        """Serialize as ``{"requests": [...]}``."""
        return self.body.model_dump_json(exclude_none=True)


def bind(sql: str, parameters: ParameterCollection) -> Statement:
    """Rewrite ``@name`` placeholders to ``?N`` and encode the bound values.

    Raises ParameterNotFoundError when a placeholder has no parameter.
    """
    rewritten, names = rewrite_placeholders(sql)
    args = []
    for name in names:
        parameter = parameters.find(name)
        if parameter is None:
            raise ParameterNotFoundError(
                f"Parameter {name} not found in parameters collection", sql=sql
            )
        args.append(encode_parameter(parameter))
    return Statement(sql=rewritten, args=args)


def build_pipeline(
    statements: list[str],
    kinds: list[OperationKind],
    parameters: ParameterCollection,
    *,
    sql: str | None = None,
    close: bool = True,
) -> RequestBatch:
    """One execute request per statement, in order, optionally closed."""
    batch = RequestBatch(sql if sql is not None else " ".join(statements))
    for statement, kind in zip(statements, kinds, strict=True):
        batch.add_execute(bind(statement, parameters), RequestRole.MAIN, kind)
    if close:
        batch.add_close()
    return batch


def build_modification_batch(
    kind: OperationKind, sql: str, parameters: ParameterCollection
) -> RequestBatch:
    """Batch for one statement executed as a non-query.

    UPDATE/DELETE statements against a resolvable table are followed by
    ``SELECT changes();``. When the statement is keyed by ``WHERE "Id" = @pN``
    and that parameter has a value, a COUNT(*) existence check runs first,
    and UPDATEs re-read the row afterwards. Everything else is sent as is.
    """
    batch = RequestBatch(sql)
    main = bind(sql, parameters)
    table = quote_table_name(sql) if kind in (OperationKind.UPDATE, OperationKind.DELETE) else None

    if table is None:
        batch.add_execute(main, RequestRole.MAIN, kind)
        batch.add_close()
        return batch

    predicate = find_key_predicate(sql)
    key = parameters.find(predicate.key_param) if predicate is not None else None
    keyed = key is not None and key.value is not None

    if keyed:
        batch.key_value = key.value
        if predicate.token_param is not None:
            token = parameters.find(predicate.token_param)
            batch.expected_version = token.value if token is not None else None
        verify = Statement(
            sql=f'SELECT COUNT(*) FROM {table} WHERE "Id" = ?1;',
            args=[encode_parameter(key)],
        )
        batch.add_execute(verify, RequestRole.VERIFY)

    batch.add_execute(main, RequestRole.MAIN, kind)
    batch.add_execute(Statement(sql=_CHANGES_SQL), RequestRole.CHANGES)

    if keyed and kind == OperationKind.UPDATE:
        refresh = Statement(
            sql=f'SELECT * FROM {table} WHERE "Id" = ?1;',
            args=[encode_parameter(key)],
        )
        batch.add_execute(refresh, RequestRole.REFRESH)

    batch.add_close()
    return batch
