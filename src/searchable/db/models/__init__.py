"""Database models for searchable."""

from .base import Base, TimestampMixin
from .indexed_record import IndexedRecord

__all__ = [
    "Base",
    "TimestampMixin",
    "IndexedRecord",
]
