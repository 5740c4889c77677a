"""Table column introspection and the process-wide column cache.

The searchable facade falls back to "every physical column of the table"
when a model declares no searchable columns. Looking those up hits either
the declarative metadata or the database inspector, so results are cached
per table name for the lifetime of the process.

Usage:
    from searchable.db.schema import get_column_cache

    columns = get_column_cache().get("posts")
    get_column_cache().invalidate("posts")  # after a migration
"""

import threading
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from sqlalchemy import MetaData, inspect
from sqlalchemy.engine import Connection, Engine

from searchable.core.logging import get_logger
from searchable.utils.exceptions import ConfigurationError

logger = get_logger(__name__)


@runtime_checkable
class SchemaIntrospector(Protocol):
    """Lists the physical column names of a table."""

    def list_columns(self, table_name: str) -> Sequence[str]: ...


class MetadataIntrospector:
    """Introspect columns from declarative ``MetaData`` without touching the database.

    Several metadata collections can be registered; the first one that
    knows the table wins.
    """

    def __init__(self, *metadata: MetaData):
        self.metadata: list[MetaData] = list(metadata)

    def register(self, metadata: MetaData) -> None:
        """Add a metadata collection to search, ignoring duplicates."""
        if not any(existing is metadata for existing in self.metadata):
            self.metadata.append(metadata)

    def list_columns(self, table_name: str) -> Sequence[str]:
        for metadata in self.metadata:
            table = metadata.tables.get(table_name)
            if table is not None:
                return [column.name for column in table.columns]
        raise ConfigurationError(f"Table not found in metadata: {table_name}")


class EngineIntrospector:
    """Introspect columns through the database inspector.

    Accepts a synchronous Engine or Connection. For async engines, run the
    lookup inside ``AsyncConnection.run_sync`` and pass the sync connection.
    """

    def __init__(self, bind: Engine | Connection, schema: str | None = None):
        self.bind = bind
        self.schema = schema

    def list_columns(self, table_name: str) -> Sequence[str]:
        inspector = inspect(self.bind)
        return [column["name"] for column in inspector.get_columns(table_name, schema=self.schema)]


class TableColumnCache:
    """Process-wide, thread-safe cache of table column names.

    Entries are populated on first use and kept until invalidated. Population
    is single-flight: concurrent first lookups of a table call the
    introspector once.
    """

    def __init__(self, introspector: SchemaIntrospector):
        self.introspector = introspector
        self._columns: dict[str, tuple[str, ...]] = {}
        self._lock = threading.Lock()

    def get(self, table_name: str) -> tuple[str, ...]:
        """Return the column names of a table, introspecting on first use."""
        columns = self._columns.get(table_name)
        if columns is not None:
            return columns

        with self._lock:
            columns = self._columns.get(table_name)
            if columns is None:
                columns = tuple(self.introspector.list_columns(table_name))
                self._columns[table_name] = columns
                logger.debug("table_columns_cached", table=table_name, column_count=len(columns))
        return columns

    def invalidate(self, table_name: str | None = None) -> None:
        """Drop one cached table, or every table when no name is given."""
        with self._lock:
            if table_name is None:
                self._columns.clear()
            else:
                self._columns.pop(table_name, None)

    def __contains__(self, table_name: object) -> bool:
        return table_name in self._columns


_default_cache: TableColumnCache | None = None
_default_cache_lock = threading.Lock()


def get_column_cache() -> TableColumnCache:
    """Get the default cache, backed by the declarative ``Base.metadata``."""
    global _default_cache

    if _default_cache is None:
        with _default_cache_lock:
            if _default_cache is None:
                from searchable.db.models.base import Base

                _default_cache = TableColumnCache(MetadataIntrospector(Base.metadata))
    return _default_cache


def set_column_cache(cache: TableColumnCache | None) -> None:
    """Replace the default cache (None resets it to the metadata-backed one)."""
    global _default_cache

    with _default_cache_lock:
        _default_cache = cache
