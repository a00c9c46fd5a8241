"""Statement splitting, classification and placeholder rewriting.

These are deliberately lightweight heuristics, not a SQL parser. Quote
tracking uses a single "current quote character": a quote opens a span and
the same character closes it, so doubled quotes inside literals simply
toggle twice. Table-name and key-predicate extraction do not understand
joins, CTEs or exotic identifier quoting.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

_QUOTES = "'\""

_PARAM_CHAR_RE = re.compile(r"[A-Za-z0-9_]")

_NAME_PART = r"(?:\"[^\"]+\"|[A-Za-z_]\w*)"

_NAME_PART_RE = re.compile(r"\"([^\"]+)\"|([A-Za-z_]\w*)")

_TABLE_RE = re.compile(
    r"\b(?:UPDATE|DELETE\s+FROM|INSERT\s+(?:OR\s+\w+\s+)?INTO)\s+"
    rf"({_NAME_PART}(?:\s*\.\s*{_NAME_PART})?)",
    re.IGNORECASE,
)

_KEY_PREDICATE_RE = re.compile(
    r"WHERE\s+\"Id\"\s*=\s*(@\w+)\b(?:\s+AND\s+\"(\w+)\"\s*=\s*(@\w+)\b)?",
    re.IGNORECASE,
)


class OperationKind(StrEnum):
    """What a statement does, as far as response shaping is concerned."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    OTHER = "OTHER"


class ClassifyPolicy(StrEnum):
    """How ``classify`` looks for the operation keyword.

    PREFIX checks the start of the left-trimmed statement. CONTAINS checks
    anywhere in the text, so a SELECT mentioning 'update' in a literal is an
    UPDATE under CONTAINS and OTHER under PREFIX.
    """

    PREFIX = "prefix"
    CONTAINS = "contains"


# Keyword check order matters for CONTAINS
_KINDS = (OperationKind.UPDATE, OperationKind.INSERT, OperationKind.DELETE)


@dataclass(frozen=True)
class KeyPredicate:
    """``WHERE "Id" = @pN`` with an optional ``AND "<token>" = @pM``."""

    key_param: str
    token_column: str | None = None
    token_param: str | None = None


def split_statements(sql: str) -> list[str]:
    """Split on ``;`` outside quoted spans.

    Each statement is stripped and keeps its terminating ``;``. Blank pieces
    are dropped; a trailing statement without ``;`` is still returned.
    """
    statements: list[str] = []
    current: list[str] = []
    quote: str | None = None

    for char in sql:
        if char in _QUOTES:
            if quote is None:
                quote = char
            elif char == quote:
                quote = None
        current.append(char)
        if char == ";" and quote is None:
            statement = "".join(current).strip()
            if statement and statement != ";":
                statements.append(statement)
            current = []

    remainder = "".join(current).strip()
    if remainder:
        statements.append(remainder)
    return statements


def classify(sql: str, policy: ClassifyPolicy = ClassifyPolicy.PREFIX) -> OperationKind:
    """Classify one statement as INSERT, UPDATE, DELETE or OTHER."""
    text = sql.lstrip().upper()
    if not text:
        return OperationKind.OTHER
    for kind in _KINDS:
        if policy == ClassifyPolicy.PREFIX and text.startswith(kind.value):
            return kind
        if policy == ClassifyPolicy.CONTAINS and kind.value in text:
            return kind
    return OperationKind.OTHER


def classify_each(
    statements: list[str], policy: ClassifyPolicy = ClassifyPolicy.PREFIX
) -> list[OperationKind]:
    """Classify each statement; the result is parallel to ``statements``."""
    return [classify(statement, policy) for statement in statements]


def _table_parts(sql: str) -> list[str] | None:
    match = _TABLE_RE.search(sql)
    if match is None:
        return None
    return [quoted or bare for quoted, bare in _NAME_PART_RE.findall(match.group(1))]


def extract_table_name(sql: str) -> str | None:
    """Best-effort target table of an INSERT, UPDATE or DELETE.

    A schema-qualified target comes back as ``schema.table`` with quotes
    removed.
    """
    parts = _table_parts(sql)
    return ".".join(parts) if parts else None


def quote_table_name(sql: str) -> str | None:
    """Target table of ``sql`` as a quoted reference, e.g. ``"main"."Items"``."""
    parts = _table_parts(sql)
    if not parts:
        return None
    return ".".join('"{}"'.format(part.replace('"', '""')) for part in parts)


def find_key_predicate(sql: str) -> KeyPredicate | None:
    """Find the ``"Id"`` equality predicate of a keyed UPDATE/DELETE."""
    match = _KEY_PREDICATE_RE.search(sql)
    if match is None:
        return None
    return KeyPredicate(
        key_param=match.group(1), token_column=match.group(2), token_param=match.group(3)
    )


def rewrite_placeholders(sql: str) -> tuple[str, list[str]]:
    """Replace ``@name`` placeholders with positional ``?N``.

    Names are numbered in order of first appearance; a repeated name reuses
    its number. Placeholders inside quoted literals are left alone.
    Returns the rewritten SQL and the ordered unique names.
    """
    names: list[str] = []
    positions: dict[str, int] = {}
    out: list[str] = []
    quote: str | None = None
    i = 0
    length = len(sql)

    while i < length:
        char = sql[i]
        if char in _QUOTES:
            if quote is None:
                quote = char
            elif char == quote:
                quote = None
        elif char == "@" and quote is None:
            end = i + 1
            while end < length and _PARAM_CHAR_RE.match(sql[end]):
                end += 1
            if end > i + 1:
                name = sql[i:end]
                if name not in positions:
                    names.append(name)
                    positions[name] = len(names)
                out.append(f"?{positions[name]}")
                i = end
                continue
        out.append(char)
        i += 1

    return "".join(out), names
