"""Repository classes for database operations."""

from .indexed_record import IndexedRecordRepository

__all__ = ["IndexedRecordRepository"]
