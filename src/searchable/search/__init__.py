"""Fuzzy search query construction and relevance ordering."""

from searchable.search.base import BaseSearchQuery
from searchable.search.columns import ColumnMap, find_column, find_columns
from searchable.search.grid import BaseGridQuery, GridQuery, make_select
from searchable.search.operators import SearchOperator
from searchable.search.parser import parse_search_str, strip_search_str
from searchable.search.relevance import SortByRelevance, apply_relevance_order
from searchable.search.searchable import JoinSpec, ModelSearch, Searchable
from searchable.search.sublime import SublimeSearch

__all__ = [
    "BaseGridQuery",
    "BaseSearchQuery",
    "ColumnMap",
    "GridQuery",
    "JoinSpec",
    "ModelSearch",
    "Searchable",
    "SearchOperator",
    "SortByRelevance",
    "SublimeSearch",
    "apply_relevance_order",
    "find_column",
    "find_columns",
    "make_select",
    "parse_search_str",
    "strip_search_str",
]
