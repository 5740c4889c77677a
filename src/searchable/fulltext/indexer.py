"""Keeping the full-text index in sync with indexable models.

Two ways to write the index:

- ``Indexer``: explicit, async, bound to an ``AsyncSession``; used for
  (re)indexing existing rows.
- ``enable_index_sync(Model)``: ORM mapper events that upsert or delete the
  index row inside the same flush that writes the model.

Usage:
    enable_index_sync(Post)

    indexer = Indexer(db_session)
    await indexer.index_all(Post)
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncSession

from searchable.core.exceptions import IndexingError
from searchable.core.logging import get_logger, log_index_write
from searchable.db.models.indexed_record import IndexedRecord
from searchable.db.repositories.indexed_record import (
    IndexedRecordRepository,
    delete_on_connection,
    upsert_on_connection,
)
from searchable.fulltext.indexable import Indexable, indexable_id_of, indexable_type_of

logger = get_logger(__name__)


def _require_indexable(obj: Any) -> Indexable:
    if not isinstance(obj, Indexable):
        raise IndexingError(
            indexable_type_of(obj),
            "model must implement get_index_title() and get_index_content()",
        )
    return obj


class Indexer:
    """Writes model instances to the full-text index.

    Attributes:
        db: The database session
        records: Repository over the index table
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.records = IndexedRecordRepository(db)

    async def index_model(self, obj: Any, *, commit: bool = True) -> IndexedRecord:
        """Create or update the index record of a persisted model instance.

        Raises:
            IndexingError: If the model is not indexable or has no primary key
        """
        indexable = _require_indexable(obj)
        indexable_type = indexable_type_of(obj)
        indexable_id = indexable_id_of(obj)

        record = await self.records.upsert(indexable_type, indexable_id, indexable, commit=commit)
        log_index_write(logger, "upsert", indexable_type, indexable_id)
        return record

    async def unindex_model(self, obj: Any, *, commit: bool = True) -> bool:
        """Remove the index record of a model instance.

        Returns:
            True if a record was removed
        """
        indexable_type = indexable_type_of(obj)
        indexable_id = indexable_id_of(obj)

        deleted = await self.records.delete_for(indexable_type, indexable_id, commit=commit)
        log_index_write(logger, "delete", indexable_type, indexable_id, deleted=deleted)
        return deleted

    async def index_models(self, objs: Iterable[Any], *, commit: bool = True) -> list[IndexedRecord]:
        """Index several model instances in one transaction."""
        records = [await self.index_model(obj, commit=False) for obj in objs]
        if commit:
            await self.db.commit()
        return records

    async def index_all(self, model: type) -> int:
        """Rebuild the index records of every row of a model.

        Returns:
            Number of indexed rows
        """
        result = await self.db.execute(select(model))
        objs = list(result.scalars().all())

        await self.index_models(objs)
        logger.info("fulltext_index_rebuilt", indexable_type=indexable_type_of(model), count=len(objs))
        return len(objs)

    async def unindex_all(self, model: type) -> int:
        """Remove the index records of every row of a model.

        Returns:
            Number of removed records
        """
        removed = await self.records.delete_type(indexable_type_of(model))
        logger.info("fulltext_index_cleared", indexable_type=indexable_type_of(model), count=removed)
        return removed


# ORM event sync


def _sync_saved(mapper, connection, target) -> None:
    if not isinstance(target, Indexable):
        return

    indexable_type = indexable_type_of(target)
    indexable_id = indexable_id_of(target)
    upsert_on_connection(
        connection,
        indexable_type,
        indexable_id,
        title=target.get_index_title() or "",
        content=target.get_index_content() or "",
    )
    log_index_write(logger, "sync_upsert", indexable_type, indexable_id)


def _sync_deleted(mapper, connection, target) -> None:
    if not isinstance(target, Indexable):
        return

    indexable_type = indexable_type_of(target)
    indexable_id = indexable_id_of(target)
    delete_on_connection(connection, indexable_type, indexable_id)
    log_index_write(logger, "sync_delete", indexable_type, indexable_id)


_SYNC_LISTENERS = (
    ("after_insert", _sync_saved),
    ("after_update", _sync_saved),
    ("after_delete", _sync_deleted),
)


def enable_index_sync(model: type) -> None:
    """Upsert/delete index records whenever instances of a model are flushed.

    Applies to subclasses of the model as well. Calling it twice is a no-op.
    """
    for identifier, listener in _SYNC_LISTENERS:
        if not event.contains(model, identifier, listener):
            event.listen(model, identifier, listener, propagate=True)
    logger.debug("fulltext_index_sync_enabled", model=model.__name__)


def disable_index_sync(model: type) -> None:
    """Stop syncing index records for a model."""
    for identifier, listener in _SYNC_LISTENERS:
        if event.contains(model, identifier, listener):
            event.remove(model, identifier, listener)
    logger.debug("fulltext_index_sync_disabled", model=model.__name__)


def is_index_sync_enabled(model: type) -> bool:
    return all(
        event.contains(model, identifier, listener) for identifier, listener in _SYNC_LISTENERS
    )
