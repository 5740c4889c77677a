"""Repository for full-text index records.

Usage:
    from searchable.db.repositories.indexed_record import IndexedRecordRepository

    repo = IndexedRecordRepository(db_session)
    record = await repo.get_for("Post", "42")
    await repo.upsert("Post", "42", post)
"""

from typing import Any

from sqlalchemy import Connection, delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from searchable.db.models.indexed_record import IndexedRecord


class IndexedRecordRepository:
    """Async CRUD operations on the ``fulltext_index`` table.

    Attributes:
        db: The database session
    """

    model = IndexedRecord

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_for(self, indexable_type: str, indexable_id: str) -> IndexedRecord | None:
        """Get the index record of one model instance."""
        stmt = select(IndexedRecord).where(
            IndexedRecord.indexable_type == indexable_type,
            IndexedRecord.indexable_id == indexable_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_type(self, indexable_type: str) -> list[IndexedRecord]:
        """List every index record of a model type."""
        stmt = (
            select(IndexedRecord)
            .where(IndexedRecord.indexable_type == indexable_type)
            .order_by(IndexedRecord.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def upsert(
        self,
        indexable_type: str,
        indexable_id: str,
        indexable: Any,
        *,
        commit: bool = True,
    ) -> IndexedRecord:
        """Create or update the index record of one model instance.

        Args:
            indexable_type: Model type key
            indexable_id: Model primary key as stored in the index
            indexable: The model providing the index title and content
            commit: Whether to commit the transaction

        Returns:
            The created or updated record
        """
        record = await self.get_for(indexable_type, indexable_id)
        if record is None:
            record = IndexedRecord(indexable_type=indexable_type, indexable_id=indexable_id)
            self.db.add(record)

        record.update_index(indexable)

        if commit:
            await self.db.commit()
            await self.db.refresh(record)
        else:
            await self.db.flush()
        return record

    async def delete_for(
        self, indexable_type: str, indexable_id: str, *, commit: bool = True
    ) -> bool:
        """Delete the index record of one model instance.

        Returns:
            True if a record was deleted, False if none existed
        """
        stmt = delete(IndexedRecord).where(
            IndexedRecord.indexable_type == indexable_type,
            IndexedRecord.indexable_id == indexable_id,
        )
        result = await self.db.execute(stmt)
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()
        return (result.rowcount or 0) > 0

    async def delete_type(self, indexable_type: str, *, commit: bool = True) -> int:
        """Delete every index record of a model type.

        Returns:
            Number of deleted records
        """
        stmt = delete(IndexedRecord).where(IndexedRecord.indexable_type == indexable_type)
        result = await self.db.execute(stmt)
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()
        return result.rowcount or 0

    async def count(self, indexable_type: str | None = None) -> int:
        """Count index records, optionally of one model type."""
        stmt = select(func.count(IndexedRecord.id))
        if indexable_type is not None:
            stmt = stmt.where(IndexedRecord.indexable_type == indexable_type)
        result = await self.db.execute(stmt)
        return result.scalar() or 0


def upsert_on_connection(
    connection: Connection,
    indexable_type: str,
    indexable_id: str,
    *,
    title: str,
    content: str,
) -> None:
    """Create or update an index record with Core statements.

    Used from ORM flush events, where only the flush connection is usable.
    """
    table = IndexedRecord.__table__
    match = (table.c.indexable_type == indexable_type) & (table.c.indexable_id == indexable_id)

    result = connection.execute(
        update(table).where(match).values(indexed_title=title, indexed_content=content)
    )
    if not result.rowcount:
        connection.execute(
            insert(table).values(
                indexable_type=indexable_type,
                indexable_id=indexable_id,
                indexed_title=title,
                indexed_content=content,
            )
        )


def delete_on_connection(connection: Connection, indexable_type: str, indexable_id: str) -> None:
    """Delete an index record with Core statements."""
    table = IndexedRecord.__table__
    connection.execute(
        delete(table).where(
            table.c.indexable_type == indexable_type,
            table.c.indexable_id == indexable_id,
        )
    )
