"""Global search across every indexed model.

Searches the ``fulltext_index`` table with the same fuzzy matching and
relevance ordering as model searches. Title matches rank above content
matches.

Usage:
    fulltext = FulltextSearch()
    records = await fulltext.run(db_session, "cp")
    posts = await fulltext.run_for_class(db_session, "cp", Post)
"""

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from searchable.config.settings import get_settings
from searchable.core.logging import get_logger
from searchable.db.models.indexed_record import IndexedRecord
from searchable.fulltext.indexable import coerce_indexable_id, indexable_type_of
from searchable.search.sublime import SublimeSearch

logger = get_logger(__name__)

INDEX_COLUMNS = ["fulltext_index.indexed_title", "fulltext_index.indexed_content"]


class FulltextSearch:
    """Search over the denormalized full-text index.

    Attributes:
        limit: Maximum number of records returned by run()
        sort: Whether results are ordered by relevance
    """

    def __init__(self, limit: int | None = None, sort: bool | None = None):
        settings = get_settings()
        self.limit = limit if limit is not None else settings.fulltext_result_limit
        self.sort = settings.relevance.enabled if sort is None else sort

    def search_query(self, search_str: Any) -> Select:
        """Build the search statement over every indexed record."""
        searcher = SublimeSearch(select(IndexedRecord), INDEX_COLUMNS, self.sort)
        return searcher.search(search_str).limit(self.limit)

    async def run(self, db: AsyncSession, search_str: Any) -> list[IndexedRecord]:
        """Search every indexed model."""
        result = await db.execute(self.search_query(search_str))
        records = list(result.scalars().all())
        logger.debug("fulltext_search", search=search_str, count=len(records))
        return records

    async def run_for_class(
        self, db: AsyncSession, search_str: Any, model: type
    ) -> list[IndexedRecord]:
        """Search the index records of one model type."""
        stmt = self.search_query(search_str).where(
            IndexedRecord.indexable_type == indexable_type_of(model)
        )
        result = await db.execute(stmt)
        records = list(result.scalars().all())
        logger.debug(
            "fulltext_search",
            search=search_str,
            indexable_type=indexable_type_of(model),
            count=len(records),
        )
        return records

    async def load_indexables(
        self,
        db: AsyncSession,
        records: Sequence[IndexedRecord],
        models: Iterable[type],
    ) -> list[Any]:
        """Load the model instances behind index records, keeping their order.

        Records whose type is not among ``models`` or whose row no longer
        exists are skipped.
        """
        by_type = {indexable_type_of(model): model for model in models}
        indexables: list[Any] = []
        for record in records:
            model = by_type.get(record.indexable_type)
            if model is None:
                continue
            obj = await db.get(model, coerce_indexable_id(model, record.indexable_id))
            if obj is not None:
                indexables.append(obj)
        return indexables
