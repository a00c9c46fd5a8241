"""Command parameters and the ordered, name-addressable parameter collection."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, overload

from libsql_http.models.types import DbType, infer_db_type


def _normalize_name(name: str) -> str:
    return name if name.startswith("@") else f"@{name}"


class Parameter:
    """A named, typed value bound to a command.

    ``db_type`` is inferred from the value unless set explicitly. ``size``
    follows the length of string/bytes values until it is set explicitly.
    """

    def __init__(
        self,
        name: str | None = None,
        value: Any = None,
        db_type: DbType | None = None,
        size: int | None = None,
    ) -> None:
        """Initialize with a name (``@`` optional), a value and an optional type."""
        self.name = name or ""
        self._db_type = db_type
        self._size = 0
        self._size_set = False
        self.source_column = ""
        self.is_nullable = False
        if size is not None:
            self.size = size
        self.value = value

    @property
    def value(self) -> Any:
        """Bound value; None binds as NULL."""
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self._value = value
        if not self._size_set and isinstance(value, str | bytes | bytearray):
            self._size = len(value)

    @property
    def db_type(self) -> DbType:
        """Explicit type, or the type inferred from the current value."""
        if self._db_type is None:
            return infer_db_type(self._value)
        return self._db_type

    @db_type.setter
    def db_type(self, db_type: DbType) -> None:
        self._db_type = DbType(db_type)

    @property
    def size(self) -> int:
        """Explicit size, or the length of a string/bytes value."""
        return self._size

    @size.setter
    def size(self, size: int) -> None:
        self._size = size
        self._size_set = True

    def reset_db_type(self) -> None:
        """Forget the explicit type and size; both follow the value again."""
        self._db_type = None
        self._size_set = False
        self._size = len(self._value) if isinstance(self._value, str | bytes | bytearray) else 0

    def __repr__(self) -> str:
        return f"Parameter(name={self.name!r}, value={self._value!r}, db_type={self.db_type!s})"


class ParameterCollection:
    """Ordered parameters, addressable by position or by name.

    Name lookups accept the name with or without its leading ``@``.
    """

    def __init__(self, parameters: Iterable[Parameter] = ()) -> None:
        """Initialize with an optional iterable of parameters."""
        self._parameters: list[Parameter] = list(parameters)

    def __len__(self) -> int:
        return len(self._parameters)

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._parameters)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return self.index_of(item) >= 0
        return item in self._parameters

    @overload
    def __getitem__(self, key: int) -> Parameter: ...

    @overload
    def __getitem__(self, key: str) -> Parameter: ...

    def __getitem__(self, key: int | str) -> Parameter:
        """Get a parameter by position or name; unknown names raise KeyError."""
        if isinstance(key, int):
            return self._parameters[key]
        index = self.index_of(key)
        if index < 0:
            raise KeyError(f"Parameter '{key}' not found.")
        return self._parameters[index]

    def __setitem__(self, key: int | str, parameter: Parameter) -> None:
        """Replace a parameter by position or name; unknown names append."""
        if isinstance(key, int):
            self._parameters[key] = parameter
            return
        index = self.index_of(key)
        if index >= 0:
            self._parameters[index] = parameter
        else:
            self._parameters.append(parameter)

    def add(self, parameter: Parameter) -> Parameter:
        """Append a parameter and return it."""
        self._parameters.append(parameter)
        return parameter

    def add_with_value(
        self, name: str, value: Any, db_type: DbType | None = None
    ) -> Parameter:
        """Create, append and return a parameter."""
        return self.add(Parameter(name, value, db_type))

    def extend(self, parameters: Iterable[Parameter]) -> None:
        """Append several parameters."""
        self._parameters.extend(parameters)

    def insert(self, index: int, parameter: Parameter) -> None:
        """Insert a parameter at ``index``."""
        self._parameters.insert(index, parameter)

    def remove(self, parameter: Parameter) -> None:
        """Remove a parameter; raises ValueError if absent."""
        self._parameters.remove(parameter)

    def remove_at(self, key: int | str) -> None:
        """Remove by position, or by name if present."""
        if isinstance(key, int):
            del self._parameters[key]
            return
        index = self.index_of(key)
        if index >= 0:
            del self._parameters[index]

    def clear(self) -> None:
        """Remove every parameter."""
        self._parameters.clear()

    def index_of(self, item: str | Parameter) -> int:
        """Position of a parameter or parameter name, or -1."""
        if isinstance(item, Parameter):
            try:
                return self._parameters.index(item)
            except ValueError:
                return -1
        wanted = _normalize_name(item)
        for index, parameter in enumerate(self._parameters):
            if _normalize_name(parameter.name) == wanted:
                return index
        return -1

    def contains(self, item: str | Parameter) -> bool:
        """True if a parameter or parameter name is present."""
        return self.index_of(item) >= 0

    def find(self, name: str) -> Parameter | None:
        """Parameter with this name, or None."""
        index = self.index_of(name)
        return self._parameters[index] if index >= 0 else None
