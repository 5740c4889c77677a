"""Grid queries: a statement plus a declared column map.

A grid query owns a base statement (joins and fixed conditions) and the
columns it displays. The column map drives the SELECT list, where aliased
entries become ``expression AS key``.

Usage:
    class UserGrid(BaseGridQuery):
        def init_query(self):
            return select().select_from(users).join(...)

        def columns(self):
            return {"full_name": "users.first || ' ' || users.last", 0: "users.email"}

    stmt = UserGrid.make().make_query()
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Protocol, Self, runtime_checkable

from sqlalchemy import Select, literal_column
from sqlalchemy.sql.elements import ColumnElement

from searchable.core.exceptions import QueryNotSetError
from searchable.db.queries.builder import QueryBuilder
from searchable.search.columns import ColumnMap, ColumnSpec


@runtime_checkable
class GridQuery(Protocol):
    """Anything that can produce a grid statement from declared columns."""

    def make_query(self) -> Select: ...

    def columns(self) -> ColumnSpec: ...


def make_select(columns: ColumnSpec) -> list[ColumnElement]:
    """Turn a column map into SELECT list items.

    Positional entries pass through as raw expressions, aliased entries are
    labelled with their key.
    """
    selects: list[ColumnElement] = []
    for key, expression in ColumnMap.of(columns):
        column = literal_column(expression)
        selects.append(column if key is None else column.label(key))
    return selects


class BaseGridQuery(ABC):
    """Base class for statements built around a declared column map."""

    def __init__(self) -> None:
        self._query: QueryBuilder | None = None

    def query(self) -> QueryBuilder:
        """Return the initialized query, creating it with init_query() on first use."""
        if self._query is None:
            self._query = QueryBuilder.coerce(self.init_query())
        return self._query

    def has_query(self) -> bool:
        return self._query is not None

    def init_query(self) -> Select:
        """Build the base statement (joins and fixed conditions).

        Raises:
            QueryNotSetError: Unless a subclass implements it
        """
        raise QueryNotSetError("init_query", type(self).__name__)

    @abstractmethod
    def columns(self) -> ColumnSpec:
        """Columns declaration of the grid."""

    def column_map(self) -> ColumnMap:
        return ColumnMap.of(self.columns())

    def make_query(self) -> Select:
        """Return the final statement of this grid: the query with its SELECT list."""
        return self.select_columns()

    def select_columns(self) -> Select:
        """Apply the declared columns as the SELECT list of the query."""
        return self.query().select(*self.make_select()).statement

    def make_select(self, columns: ColumnSpec = None) -> list[ColumnElement]:
        """Create SELECT list items from columns (defaults to the declared ones)."""
        return make_select(columns if columns else self.columns())

    def set_query(self, query: QueryBuilder | Select) -> Self:
        self._query = QueryBuilder.coerce(query)
        return self

    def set_select_query(self, query: Select) -> Select:
        """Apply this grid's SELECT list to another statement."""
        return QueryBuilder(query).select(*self.make_select()).statement

    def get_column(self, column_key: str) -> str:
        """Get the actual column expression of a column key.

        Raises:
            ColumnNotFoundError: If the key matches no column
        """
        return self.column_map().find(column_key)

    def get_columns(self, column_keys: Iterable[str]) -> list[str]:
        """Get the actual column expressions of several column keys."""
        return [self.get_column(key) for key in column_keys]

    @classmethod
    def make(cls) -> Self:
        return cls()
