"""SQL text helpers: splitting, classification, placeholder rewriting."""

from libsql_http.sql.splitter import (
    ClassifyPolicy,
    KeyPredicate,
    OperationKind,
    classify,
    classify_each,
    extract_table_name,
    find_key_predicate,
    quote_table_name,
    rewrite_placeholders,
    split_statements,
)

__all__ = [
    "ClassifyPolicy",
    "KeyPredicate",
    "OperationKind",
    "classify",
    "classify_each",
    "extract_table_name",
    "find_key_predicate",
    "quote_table_name",
    "rewrite_placeholders",
    "split_statements",
]
