"""
searchable - Fuzzy substring search for SQLAlchemy selects.

Adds Sublime-style fuzzy matching ("cp" finds "control panel") and relevance
ordering to statements over declarative models or hand-written grid queries,
plus a denormalized full-text index table for global search.
"""

from searchable.search import (
    BaseGridQuery,
    BaseSearchQuery,
    ColumnMap,
    ModelSearch,
    Searchable,
    SearchOperator,
    SublimeSearch,
    parse_search_str,
)

__version__ = "0.1.0"

__all__ = [
    "BaseGridQuery",
    "BaseSearchQuery",
    "ColumnMap",
    "ModelSearch",
    "Searchable",
    "SearchOperator",
    "SublimeSearch",
    "parse_search_str",
    "__version__",
]
