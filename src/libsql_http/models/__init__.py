"""Parameter types and pipeline wire models."""

from libsql_http.models.parameters import Parameter, ParameterCollection
from libsql_http.models.types import (
    ConnectionState,
    DbType,
    IsolationLevel,
    TransactionState,
    infer_db_type,
)
from libsql_http.models.wire import (
    BlobValue,
    CloseRequest,
    ExecuteRequest,
    FloatValue,
    IntegerValue,
    NullValue,
    PipelineBody,
    PipelineResponse,
    Statement,
    StatementResult,
    TextValue,
    WireValue,
)

__all__ = [
    "BlobValue",
    "CloseRequest",
    "ConnectionState",
    "DbType",
    "ExecuteRequest",
    "FloatValue",
    "IntegerValue",
    "IsolationLevel",
    "NullValue",
    "Parameter",
    "ParameterCollection",
    "PipelineBody",
    "PipelineResponse",
    "Statement",
    "StatementResult",
    "TextValue",
    "TransactionState",
    "WireValue",
    "infer_db_type",
]
