"""Query helpers for search statement construction."""

from .builder import QueryBuilder, normalize_join_kind, to_column
from .functions import locate

__all__ = [
    "QueryBuilder",
    "locate",
    "normalize_join_kind",
    "to_column",
]
