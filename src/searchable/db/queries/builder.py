"""Explicit query wrapper used by the search layer.

SQLAlchemy ``Select`` objects are immutable; every builder call here returns
a new statement. Search code needs a shared, mutable handle instead (a
searcher, its relevance ranker and the searchable facade all touch the same
query during one call), so ``QueryBuilder`` holds the current statement and
replaces it on each operation.

Only the operations the search layer uses are exposed. Anything else should
be done on ``builder.statement`` directly.

Usage:
    builder = QueryBuilder(select(Post))
    builder.join("users", "users.id", "posts.user_id")
    builder.where_raw("(posts.title LIKE '%c%p%')")
    stmt = builder.statement
"""

import re
from typing import Any

from sqlalchemy import FromClause, Select, literal_column, table, text
from sqlalchemy.sql.elements import ColumnElement

from searchable.config.settings import JoinKind
from searchable.core.exceptions import UnsupportedJoinError

# Join kind aliases accepted from searchable join declarations
_JOIN_KINDS: dict[str, JoinKind] = {
    "left": JoinKind.LEFT,
    "leftjoin": JoinKind.LEFT,
    "left_join": JoinKind.LEFT,
    "outer": JoinKind.LEFT,
    "inner": JoinKind.INNER,
    "join": JoinKind.INNER,
    "inner_join": JoinKind.INNER,
    "full": JoinKind.FULL,
    "full_join": JoinKind.FULL,
}


def normalize_join_kind(kind: str | JoinKind, table_name: str = "") -> JoinKind:
    """Map a join kind or one of its aliases to a JoinKind.

    Only left, inner and full joins are supported. A right join cannot be
    expressed on a statement whose FROM is already fixed (it would need the
    model table on the joined side), so ``right``/``rightJoin`` and other
    kinds are rejected; declare the join from the other table as ``left``.

    Raises:
        UnsupportedJoinError: If the kind is not recognized
    """
    if isinstance(kind, JoinKind):
        return kind
    normalized = _JOIN_KINDS.get(str(kind).strip().lower())
    if normalized is None:
        raise UnsupportedJoinError(table_name, str(kind))
    return normalized


# A colon starting a word, not part of a "::" cast and not already escaped
_BIND_COLON = re.compile(r"(?<![:\\]):(?=\w)")


def escape_colons(sql: str) -> str:
    """Escape colons so ``text()`` does not read ``:word`` as a bind parameter.

    Column expressions such as ``posts.title || ':x'`` or
    ``to_char(created_at, 'HH24:MI')`` are kept verbatim.
    """
    return _BIND_COLON.sub(r"\\:", sql)


def raw_clause(sql: str, params: dict[str, Any]):
    """Build a raw SQL clause; colons are literal unless params are bound."""
    if params:
        return text(sql).bindparams(**params)
    return text(escape_colons(sql))


def to_column(expression: Any) -> ColumnElement:
    """Coerce a raw SQL expression string into a column element."""
    if isinstance(expression, str):
        return literal_column(expression)
    return expression


class QueryBuilder:
    """Mutable handle over a SQLAlchemy ``Select`` statement.

    Attributes:
        statement: The current statement, replaced after every operation
    """

    def __init__(self, statement: Select):
        if not isinstance(statement, Select):
            raise TypeError(f"QueryBuilder requires a Select, got {type(statement).__name__}")
        self._statement = statement

    @classmethod
    def coerce(cls, query: "QueryBuilder | Select") -> "QueryBuilder":
        """Wrap a Select, or return an existing builder unchanged."""
        if isinstance(query, QueryBuilder):
            return query
        return cls(query)

    @property
    def statement(self) -> Select:
        return self._statement

    @property
    def selected_columns(self) -> list[ColumnElement]:
        """Columns currently in the SELECT list."""
        return list(self._statement.selected_columns)

    def has_select(self) -> bool:
        """Whether the statement has an explicit SELECT list."""
        return len(self._statement.selected_columns) > 0

    @property
    def from_table(self) -> str | None:
        """Name of the leftmost table the statement selects from."""
        froms = self._statement.get_final_froms()
        if not froms:
            return None

        source: Any = froms[0]
        # Walk down the left side of nested joins
        while getattr(source, "left", None) is not None:
            source = source.left
        return getattr(source, "name", None)

    def select(self, *columns: Any) -> "QueryBuilder":
        """Replace the SELECT list, keeping the current FROM clause."""
        self._statement = self._statement.with_only_columns(
            *[to_column(col) for col in columns],
            maintain_column_froms=True,
        )
        return self

    def add_select(self, *columns: Any) -> "QueryBuilder":
        """Append columns to the SELECT list."""
        self._statement = self._statement.add_columns(*[to_column(col) for col in columns])
        return self

    def where_raw(self, sql: str, **params: Any) -> "QueryBuilder":
        """Add a raw SQL predicate to the WHERE clause.

        Without params every colon is literal; with params, ``:name``
        placeholders are bound.
        """
        self._statement = self._statement.where(raw_clause(sql, params))
        return self

    def having_raw(self, sql: str, **params: Any) -> "QueryBuilder":
        """Add a raw SQL predicate to the HAVING clause, like where_raw()."""
        self._statement = self._statement.having(raw_clause(sql, params))
        return self

    def group_by(self, *columns: Any) -> "QueryBuilder":
        """Add GROUP BY expressions."""
        self._statement = self._statement.group_by(*[to_column(col) for col in columns])
        return self

    def join(
        self,
        target: str | FromClause,
        left: str,
        right: str,
        kind: str | JoinKind = JoinKind.LEFT,
    ) -> "QueryBuilder":
        """Join a table on ``left = right``.

        Args:
            target: Table name (optionally ``schema.table``) or FromClause
            left: Left side of the equality, e.g. ``"users.id"``
            right: Right side of the equality, e.g. ``"posts.user_id"``
            kind: Join kind (``left``, ``inner``, ``full`` or an alias);
                right joins are not supported

        Raises:
            UnsupportedJoinError: If the join kind is unknown or unsupported
        """
        if isinstance(target, str):
            target_name = target
            schema, _, name = target.rpartition(".")
            join_target: FromClause = table(name, schema=schema or None)
        else:
            target_name = getattr(target, "name", str(target))
            join_target = target

        join_kind = normalize_join_kind(kind, target_name)
        onclause = literal_column(left) == literal_column(right)

        self._statement = self._statement.join(
            join_target,
            onclause,
            isouter=join_kind is JoinKind.LEFT,
            full=join_kind is JoinKind.FULL,
        )
        return self

    def order_by(self, *clauses: Any, prepend: bool = False) -> "QueryBuilder":
        """Add ORDER BY expressions.

        Args:
            clauses: Column elements or raw SQL expression strings
            prepend: Place the clauses before any existing ordering
        """
        new_clauses = [to_column(clause) for clause in clauses]
        if prepend:
            existing = tuple(self._statement._order_by_clauses)
            self._statement = self._statement.order_by(None).order_by(*new_clauses, *existing)
        else:
            self._statement = self._statement.order_by(*new_clauses)
        return self

    def __repr__(self) -> str:
        return f"<QueryBuilder(from={self.from_table})>"
