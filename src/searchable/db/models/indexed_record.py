"""Denormalized full-text index records."""

from typing import Any

from sqlalchemy import Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class IndexedRecord(Base, TimestampMixin):
    """One searchable row per indexed model instance.

    Rows are keyed by (indexable_type, indexable_id) and hold the title and
    content strings the model computed for itself. The table is a flat copy
    used by the global full-text search; it is rewritten on every save of the
    source model.
    """

    __tablename__ = "fulltext_index"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    indexable_type: Mapped[str] = mapped_column(String(255), nullable=False)
    indexable_id: Mapped[str] = mapped_column(String(64), nullable=False)

    indexed_title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    indexed_content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        UniqueConstraint("indexable_type", "indexable_id", name="uq_fulltext_indexable"),
        Index("idx_fulltext_type", "indexable_type"),
    )

    def update_index(self, indexable: Any) -> "IndexedRecord":
        """Copy the index title and content from the indexable model."""
        self.indexed_title = indexable.get_index_title() or ""
        self.indexed_content = indexable.get_index_content() or ""
        return self

    def __repr__(self) -> str:
        return (
            f"<IndexedRecord(id={self.id}, "
            f"type={self.indexable_type}, indexable_id={self.indexable_id})>"
        )
