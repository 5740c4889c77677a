"""Relevance ordering for fuzzy searches.

Rows are ranked per sort column, in column order:

1. the search string occurs literally (case-insensitive): its 1-based position,
   so earlier occurrences rank first;
2. the column only matches the fuzzy pattern: ``not_found_rank``;
3. the column does not match at all: ``not_found_rank + 1``.

The first column dominates and later columns break ties. The keys are put in
front of any ordering the statement already has.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import String, case, func, literal
from sqlalchemy.sql.elements import ColumnElement

from searchable.config.settings import get_settings
from searchable.core.logging import get_logger
from searchable.db.queries.builder import QueryBuilder, to_column
from searchable.db.queries.functions import locate
from searchable.search.parser import parse_search_str
from searchable.utils.exceptions import ConfigurationError

logger = get_logger(__name__)


def relevance_key(
    column: Any,
    search_str: str,
    pattern: str,
    not_found_rank: int,
) -> ColumnElement:
    """Build the rank expression for one column."""
    haystack = func.lower(to_column(column))
    position = locate(func.lower(literal(search_str, String)), haystack)

    return case(
        (position > 0, position),
        (haystack.like(literal(pattern.lower(), String)), literal(not_found_rank)),
        else_=literal(not_found_rank + 1),
    )


def relevance_keys(
    columns: Iterable[Any],
    search_str: Any,
    not_found_rank: int | None = None,
) -> list[ColumnElement]:
    """Build one rank expression per sort column, in column order."""
    if not_found_rank is None:
        not_found_rank = get_settings().relevance.not_found_rank

    search_str = "" if search_str is None else str(search_str)
    pattern = parse_search_str(search_str)
    return [relevance_key(column, search_str, pattern, not_found_rank) for column in columns]


class SortByRelevance:
    """Applies relevance ordering to a query."""

    @staticmethod
    def sort(
        query: QueryBuilder,
        columns: Sequence[Any],
        search_str: Any,
        not_found_rank: int | None = None,
    ) -> QueryBuilder:
        """Prepend relevance keys for the columns to the query's ordering.

        Args:
            query: Builder holding the statement to order
            columns: Sort column expressions; the first one dominates
            search_str: The original, unparsed search string
            not_found_rank: Override of the configured not-found rank

        Raises:
            ConfigurationError: If there are no sort columns
        """
        if not columns:
            raise ConfigurationError("Sort by relevance requires at least one sort column.")

        keys = relevance_keys(columns, search_str, not_found_rank)
        query.order_by(*keys, prepend=True)
        logger.debug("relevance_order_applied", column_count=len(keys))
        return query


def apply_relevance_order(
    query: QueryBuilder,
    sort_columns: Sequence[Any],
    search_str: Any,
) -> QueryBuilder:
    """Functional alias of SortByRelevance.sort."""
    return SortByRelevance.sort(query, sort_columns, search_str)
