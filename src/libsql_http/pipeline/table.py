"""In-memory tabular results reconstructed from execute responses."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def column_type(decltype: str | None) -> type:
    """Python type for a declared column type.

    INTEGER, REAL, TEXT and BLOB map directly; declared date/time types
    (DATE, DATETIME, TIMESTAMP, ...) map to datetime; anything else is str.
    """
    name = (decltype or "").strip().upper()
    if name == "INTEGER":
        return int
    if name == "REAL":
        return float
    if name == "TEXT":
        return str
    if name == "BLOB":
        return bytes
    if "DATE" in name or "TIME" in name:
        return datetime
    return str


@dataclass(frozen=True)
class ResultColumn:
    """A named, typed column."""

    name: str
    python_type: type = str
    decltype: str | None = None


@dataclass
class ResultTable:
    """Columns plus decoded rows; cells are None for SQL NULL."""

    columns: list[ResultColumn] = field(default_factory=list)
    rows: list[tuple[Any, ...]] = field(default_factory=list)

    @classmethod
    def single_value(cls, name: str, value: Any) -> "ResultTable":
        """One column, one row."""
        return cls(columns=[ResultColumn(name, type(value))], rows=[(value,)])

    @property
    def names(self) -> list[str]:
        return [column.name for column in self.columns]

    def ordinal(self, name: str) -> int:
        """Column position by name; exact match first, then case-insensitive."""
        for index, column in enumerate(self.columns):
            if column.name == name:
                return index
        lowered = name.lower()
        for index, column in enumerate(self.columns):
            if column.name.lower() == lowered:
                return index
        raise IndexError(f"Column '{name}' not found.")
