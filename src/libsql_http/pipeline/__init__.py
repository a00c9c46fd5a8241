"""Pipeline batches, result tables and response interpretation."""

from libsql_http.pipeline.batch import (
    RequestBatch,
    RequestRole,
    bind,
    build_modification_batch,
    build_pipeline,
)
from libsql_http.pipeline.interpreter import (
    PipelineReply,
    build_result_tables,
    interpret_non_query,
    interpret_scalar,
)
from libsql_http.pipeline.table import ResultColumn, ResultTable, column_type

__all__ = [
    "PipelineReply",
    "RequestBatch",
    "RequestRole",
    "ResultColumn",
    "ResultTable",
    "bind",
    "build_modification_batch",
    "build_pipeline",
    "build_result_tables",
    "column_type",
    "interpret_non_query",
    "interpret_scalar",
]
