"""Base class for searchable grid queries."""

from typing import TYPE_CHECKING, Any, Self

from sqlalchemy import Select

from searchable.config.settings import get_settings
from searchable.core.exceptions import QueryNotSetError
from searchable.search.columns import ColumnMap, ColumnSpec
from searchable.search.operators import SearchOperator
from searchable.search.relevance import SortByRelevance
from searchable.search.grid import BaseGridQuery
from searchable.utils.exceptions import ConfigurationError

if TYPE_CHECKING:
    from searchable.search.sublime import SublimeSearch


class BaseSearchQuery(BaseGridQuery):
    """A grid query that can be filtered by a search string.

    Subclasses declare ``columns()`` and ``init_query()``; ``search()`` hands
    both to a SublimeSearch searcher.

    Attributes:
        search_operator: Whether to compare in WHERE (raw expressions) or
            HAVING (output aliases)
        search_str: The last search string, set on every search() call
        sort: Whether searches are ordered by relevance
    """

    def __init__(
        self,
        sort: bool | None = None,
        search_operator: str | SearchOperator = SearchOperator.WHERE,
    ) -> None:
        super().__init__()
        self.search_operator = SearchOperator.coerce(search_operator)
        self.search_str: Any = None
        self.sort = get_settings().relevance.enabled if sort is None else sort

    def search(self, search_str: Any) -> Select:
        """Apply a search to the query and return the resulting statement."""
        self.search_str = search_str
        return self.searcher().search(search_str)

    def searcher(self) -> "SublimeSearch":
        """Return a searcher bound to this grid's query, columns and settings."""
        from searchable.search.sublime import SublimeSearch

        return SublimeSearch(
            self.query(),
            self.columns(),
            self.sort,
            self.search_operator,
            sort_columns=self.sort_columns(),
        )

    def sort_columns(self) -> ColumnSpec:
        """Columns used to rank results by relevance."""
        return self.columns()

    def set_search_operator(self, search_operator: str | SearchOperator) -> Self:
        self.search_operator = SearchOperator.coerce(search_operator)
        return self

    def sort_by_relevance(self, sort: bool = True) -> Self:
        self.sort = sort
        return self

    # Alias of sort_by_relevance
    def set_sort(self, sort: bool = True) -> Self:
        return self.sort_by_relevance(sort)

    def should_sort_by_relevance(self) -> bool:
        return self.sort

    def apply_sort_by_relevance(self) -> None:
        """Order the query by relevance of the last search string.

        Raises:
            QueryNotSetError: If no query is bound
            ConfigurationError: If no sort columns are declared
        """
        if not self.has_query():
            raise QueryNotSetError("apply_sort_by_relevance", type(self).__name__)

        sort_columns = ColumnMap.of(self.sort_columns()).expressions()
        if not sort_columns:
            raise ConfigurationError(
                f"Sort by relevance requires sort columns on {type(self).__name__}."
            )

        SortByRelevance.sort(self.query(), sort_columns, self.search_str)
