"""Column maps: logical column keys mapped to physical SQL expressions.

A column map is an ordered list of entries. An entry without a key is
positional: its expression is both what is displayed and what is compared.
An entry with a key is aliased and projects as ``expression AS key``.

    ColumnMap({"full_name": "CONCAT(u.first, ' ', u.last)", 0: "u.email"})
    ColumnMap(["posts.title", ("author", "users.name")])

Lookups by key also match positional expressions equal to the key or ending
in ``.<key>``, so ``"title"`` resolves to ``"posts.title"``.
"""

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any, Union

from searchable.core.exceptions import ColumnNotFoundError
from searchable.utils.exceptions import ConfigurationError

ColumnEntry = tuple[str | None, str]
ColumnSpec = Union["ColumnMap", Mapping[Any, str], Sequence[Any], None]

_MISSING = object()


class ColumnMap:
    """Ordered mapping of optional column keys to SQL expressions."""

    def __init__(self, columns: ColumnSpec = None):
        self._entries: list[ColumnEntry] = []

        if columns is None:
            return
        if isinstance(columns, ColumnMap):
            self._entries = list(columns._entries)
        elif isinstance(columns, Mapping):
            for key, expression in columns.items():
                self._set(None if isinstance(key, int) else str(key), expression)
        elif isinstance(columns, (str, bytes)):
            raise ConfigurationError("Column map must be a mapping or a sequence, not a string")
        else:
            for item in columns:
                if isinstance(item, str):
                    self._set(None, item)
                elif isinstance(item, tuple) and len(item) == 2:
                    key, expression = item
                    self._set(None if key is None or isinstance(key, int) else str(key), expression)
                else:
                    raise ConfigurationError(f"Invalid column map entry: {item!r}")

    @classmethod
    def of(cls, columns: ColumnSpec) -> "ColumnMap":
        """Return columns as a ColumnMap, without copying an existing one."""
        if isinstance(columns, ColumnMap):
            return columns
        return cls(columns)

    def _set(self, key: str | None, expression: Any) -> None:
        if not isinstance(expression, str):
            raise ConfigurationError(f"Column expression must be a string: {expression!r}")
        if key is not None:
            for index, (existing_key, _) in enumerate(self._entries):
                if existing_key == key:
                    self._entries[index] = (key, expression)
                    return
        self._entries.append((key, expression))

    def entries(self) -> list[ColumnEntry]:
        """All (key, expression) entries in order."""
        return list(self._entries)

    def expressions(self) -> list[str]:
        """The physical SQL expressions in order."""
        return [expression for _, expression in self._entries]

    def keys(self) -> list[str]:
        """Output column names in order.

        Aliased entries use their key, qualified expressions use the part
        after the last dot, anything else is used verbatim.
        """
        return [output_key(key, expression) for key, expression in self._entries]

    def aliases(self) -> dict[str, str]:
        """Only the aliased entries, as key -> expression."""
        return {key: expression for key, expression in self._entries if key is not None}

    def has_key(self, key: str) -> bool:
        """Whether the key is an explicit alias in this map."""
        return any(existing == key for existing, _ in self._entries)

    def has_expression(self, expression: str) -> bool:
        """Whether the expression is one of the mapped expressions."""
        return any(existing == expression for _, existing in self._entries)

    def get(self, key: str, default: Any = None) -> Any:
        """Resolve a key to its expression, or return default."""
        for existing, expression in self._entries:
            if existing is not None and existing == key:
                return expression

        suffix = f".{key}"
        for _, expression in self._entries:
            if expression == key or expression.endswith(suffix):
                return expression

        return default

    def find(self, key: str) -> str:
        """Resolve a key to its expression.

        Raises:
            ColumnNotFoundError: If no entry matches the key
        """
        expression = self.get(key, _MISSING)
        if expression is _MISSING:
            raise ColumnNotFoundError(key, self.expressions())
        return expression

    def find_many(self, keys: Iterable[str]) -> list[str]:
        """Resolve several keys, preserving their order."""
        return [self.find(key) for key in keys]

    def merge(self, other: ColumnSpec) -> "ColumnMap":
        """Return a new map with other's entries applied on top of this one.

        Aliased entries replace an existing entry with the same key in
        place; positional entries are appended.
        """
        merged = ColumnMap(self)
        for key, expression in ColumnMap.of(other)._entries:
            merged._set(key, expression)
        return merged

    def __iter__(self) -> Iterator[ColumnEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ColumnMap):
            return self._entries == other._entries
        return NotImplemented

    def __repr__(self) -> str:
        return f"ColumnMap({self._entries!r})"


def output_key(key: str | None, expression: str) -> str:
    """Name a column entry carries in the query result."""
    if key is not None:
        return key
    if "." in expression:
        return expression.rsplit(".", 1)[1]
    return expression


def find_column(columns: ColumnSpec, column_key: str) -> str:
    """Resolve a logical column key against a column map.

    Raises:
        ColumnNotFoundError: If nothing matches
    """
    return ColumnMap.of(columns).find(column_key)


def find_columns(columns: ColumnSpec, column_keys: Iterable[str]) -> list[str]:
    """Resolve several logical column keys, preserving their order."""
    return ColumnMap.of(columns).find_many(column_keys)
