"""Denormalized full-text index and global search."""

from searchable.fulltext.indexable import Indexable, indexable_id_of, indexable_type_of
from searchable.fulltext.indexer import (
    Indexer,
    disable_index_sync,
    enable_index_sync,
    is_index_sync_enabled,
)
from searchable.fulltext.search import FulltextSearch

__all__ = [
    "FulltextSearch",
    "Indexable",
    "Indexer",
    "disable_index_sync",
    "enable_index_sync",
    "indexable_id_of",
    "indexable_type_of",
    "is_index_sync_enabled",
]
