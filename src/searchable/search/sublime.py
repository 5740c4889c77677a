"""A search resembling the fuzzy file finder in Sublime Text (ctrl+p).

Typing "cp" matches "control panel": every alphanumeric character of the
search string has to appear in order in one of the compared columns.
"""

from typing import Any

from sqlalchemy import Select

from searchable.core.logging import get_logger, log_search_applied
from searchable.db.queries.builder import QueryBuilder
from searchable.search.base import BaseSearchQuery
from searchable.search.columns import ColumnMap, ColumnSpec
from searchable.search.operators import SearchOperator
from searchable.search.parser import parse_search_str

logger = get_logger(__name__)


class SublimeSearch(BaseSearchQuery):
    """Fuzzy subsequence search over a column map.

    Case sensitivity of the LIKE filter follows the database: SQLite and
    MySQL ignore ASCII case, PostgreSQL does not. The relevance ranking
    always compares lower-cased values.

    Example:
        >>> searcher = SublimeSearch(select(Post), {"title": "posts.title"})
        >>> stmt = searcher.search("c-p!")
        # WHERE (posts.title LIKE '%c%p%') ORDER BY <relevance of "c-p!">
    """

    def __init__(
        self,
        query: QueryBuilder | Select | None = None,
        columns: ColumnSpec = None,
        sort: bool | None = None,
        search_operator: str | SearchOperator = SearchOperator.WHERE,
        sort_columns: ColumnSpec = None,
    ) -> None:
        super().__init__(sort=sort, search_operator=search_operator)
        self._columns = ColumnMap(columns)
        self._sort_columns = None if sort_columns is None else ColumnMap(sort_columns)
        if query is not None:
            self.set_query(query)

    def columns(self) -> ColumnMap:
        return self._columns

    def set_columns(self, columns: ColumnSpec) -> "SublimeSearch":
        self._columns = ColumnMap(columns)
        return self

    def sort_columns(self) -> ColumnMap:
        return self._columns if self._sort_columns is None else self._sort_columns

    def column_keys(self) -> list[str]:
        """Output column names, used as compare targets for HAVING."""
        return self._columns.keys()

    def columns_to_compare(self) -> list[str]:
        """Column expressions for WHERE, output aliases for HAVING."""
        if self.search_operator is SearchOperator.HAVING:
            return self.column_keys()
        return self._columns.expressions()

    def get_column(self, column_key: str) -> str:
        """Resolve a column key against the columns being compared."""
        return ColumnMap(self.columns_to_compare()).find(column_key)

    def searcher(self) -> "SublimeSearch":
        return self

    def search(self, search_str: Any) -> Select:
        """Add the search condition (and relevance ordering) to the query.

        Returns the statement unchanged when there is nothing to compare.

        Raises:
            QueryNotSetError: If no query is bound
        """
        query = self.query()
        columns_to_compare = self.columns_to_compare()

        if not columns_to_compare:
            return query.statement

        self.search_str = search_str
        pattern = self.parse_search_str(search_str)

        conditions = [f"{column} LIKE '{pattern}'" for column in columns_to_compare]
        clause = "(" + " OR ".join(conditions) + ")"

        if self.search_operator is SearchOperator.HAVING:
            query.having_raw(clause)
        else:
            query.where_raw(clause)

        log_search_applied(
            logger,
            operator=self.search_operator.value,
            columns=columns_to_compare,
            pattern=pattern,
            sort_by_relevance=self.should_sort_by_relevance(),
        )

        if self.should_sort_by_relevance():
            self.apply_sort_by_relevance()

        return query.statement

    def parse_search_str(self, search_str: Any) -> str:
        return parse_search_str(search_str)
