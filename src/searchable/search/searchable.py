"""Searchable facade for declarative models.

A model opts into search by declaring its configuration as class
attributes; the facade reads that configuration and applies searches to
statements over the model.

    class Post(Base):
        __tablename__ = "posts"
        __searchable__ = {
            "columns": {"title": "posts.title", "author": "users.name"},
            "joins": {"users": ("users.id", "posts.user_id")},
        }

    posts = ModelSearch(Post)
    stmt = posts.apply_search(select(Post), "cp")

Precedence for columns, sortable columns and joins is: overrides set on
the facade, then ``__searchable_columns__`` / ``__sortable_columns__`` /
``__searchable_joins__``, then the matching key of ``__searchable__``, then
the fallback (all physical table columns, or no joins).
"""

from collections.abc import Mapping
from typing import Any, NamedTuple, Protocol, Self, runtime_checkable

from sqlalchemy import Select

from searchable.config.settings import get_settings
from searchable.core.exceptions import ColumnNotFoundError
from searchable.core.logging import get_logger
from searchable.db.queries.builder import QueryBuilder, to_column
from searchable.db.schema import MetadataIntrospector, TableColumnCache, get_column_cache
from searchable.search.columns import ColumnMap, ColumnSpec
from searchable.search.operators import SearchOperator
from searchable.search.sublime import SublimeSearch
from searchable.utils.exceptions import ConfigurationError

logger = get_logger(__name__)


class JoinSpec(NamedTuple):
    """Join of a target table on ``left = right``."""

    left: str
    right: str
    kind: str = "left"

    @classmethod
    def of(cls, value: Any) -> "JoinSpec":
        """Build a JoinSpec from a JoinSpec, a 2/3-tuple or a mapping."""
        if isinstance(value, JoinSpec):
            return value
        if isinstance(value, Mapping):
            default_kind = get_settings().default_join_kind.value
            return cls(value["left"], value["right"], value.get("kind", default_kind))
        if isinstance(value, (tuple, list)) and len(value) in (2, 3):
            if len(value) == 2:
                return cls(value[0], value[1], get_settings().default_join_kind.value)
            return cls(*value)
        raise ConfigurationError(f"Invalid searchable join: {value!r}")


JoinSpecs = dict[str, JoinSpec]


def normalize_joins(joins: Mapping[str, Any] | None) -> JoinSpecs:
    return {table: JoinSpec.of(join) for table, join in (joins or {}).items()}


@runtime_checkable
class Searchable(Protocol):
    """Capability of an entity whose rows can be matched against a search string."""

    def searchable_columns(self) -> ColumnMap: ...

    def sortable_columns(self) -> ColumnMap: ...

    def searchable_joins(self) -> JoinSpecs: ...

    def apply_search(self, query: Select, search_str: Any) -> Select: ...


class ModelSearch:
    """Searchable implementation for a declarative model class.

    Attributes:
        model: The declarative model class
        table_name: The model's table name
    """

    def __init__(
        self,
        model: type,
        *,
        column_cache: TableColumnCache | None = None,
        sort_by_relevance: bool | None = None,
    ) -> None:
        table = getattr(model, "__table__", None)
        if table is None:
            raise ConfigurationError(f"{model.__name__} is not a mapped model with a table")

        self.model = model
        self.table_name: str = table.name
        self._column_cache = column_cache

        self._searchable_columns: ColumnMap | None = None
        self._sortable_columns: ColumnMap | None = None
        self._searchable_joins: JoinSpecs | None = None

        self._searchable_enabled = True
        self._sort_by_relevance = (
            get_settings().relevance.enabled if sort_by_relevance is None else sort_by_relevance
        )
        self._search_query: SublimeSearch | None = None
        self._owns_search_query = False

    # Configuration lookup

    def _declared(self, attribute: str, config_key: str) -> Any:
        if hasattr(self.model, attribute):
            return getattr(self.model, attribute)
        config = getattr(self.model, "__searchable__", None) or {}
        return config.get(config_key)

    @property
    def column_cache(self) -> TableColumnCache:
        if self._column_cache is None:
            cache = get_column_cache()
            if isinstance(cache.introspector, MetadataIntrospector):
                cache.introspector.register(self.model.__table__.metadata)
            return cache
        return self._column_cache

    def get_table_columns(self) -> tuple[str, ...]:
        """Physical column names of the model's table."""
        return self.column_cache.get(self.table_name)

    def searchable_columns(self) -> ColumnMap:
        """Columns compared against the search string."""
        if self._searchable_columns is not None:
            return self._searchable_columns

        declared = self._declared("__searchable_columns__", "columns")
        if declared is not None:
            return ColumnMap(declared)

        return ColumnMap(list(self.get_table_columns()))

    def sortable_columns(self) -> ColumnMap:
        """Columns callers may order by."""
        if self._sortable_columns is not None:
            return self._sortable_columns

        declared = self._declared("__sortable_columns__", "sortable_columns")
        if declared is not None:
            return ColumnMap(declared)

        return ColumnMap(list(self.get_table_columns()))

    def searchable_joins(self) -> JoinSpecs:
        """Tables joined before searching, keyed by table name."""
        if self._searchable_joins is not None:
            return self._searchable_joins

        return normalize_joins(self._declared("__searchable_joins__", "joins"))

    def all_columns(self) -> ColumnMap:
        """Searchable and sortable columns merged, sortable entries last."""
        return self.searchable_columns().merge(self.sortable_columns())

    # Column validation

    def is_column_valid(self, column: str) -> bool:
        """Whether a column name is safe to use in dynamic filters or ordering.

        Derived columns are keys of the merged searchable/sortable map,
        regular columns are values of it or physical columns of the table.
        """
        all_columns = self.all_columns()
        if all_columns.has_key(column):
            return True
        if all_columns.has_expression(column):
            return True
        return column in self.get_table_columns()

    def get_sortable_column(self, column: str) -> str:
        """Resolve a column key to its expression in the merged map.

        Raises:
            ColumnNotFoundError: If the key matches nothing
        """
        return self.all_columns().find(column)

    def order_by_column(self, query: Select, column: str, descending: bool = False) -> Select:
        """Order a statement by a caller-supplied column name after validating it.

        Raises:
            ColumnNotFoundError: If the column is not a valid column of the model
        """
        if self.is_column_valid(column):
            expression = self.all_columns().get(column, column)
            order = to_column(expression)
            return QueryBuilder(query).order_by(order.desc() if descending else order.asc()).statement

        raise ColumnNotFoundError(column, self.all_columns().expressions())

    # Search

    def apply_searchable_joins(self, query: QueryBuilder) -> QueryBuilder:
        for table, join in self.searchable_joins().items():
            query.join(table, join.left, join.right, join.kind)
        return query

    def search_query(self) -> SublimeSearch:
        """Return the retained searcher, creating it on first use.

        A model may provide ``default_search_query(facade)`` to supply its own.
        """
        if self._search_query is not None:
            return self._search_query

        factory = getattr(self.model, "default_search_query", None)
        if callable(factory):
            self._search_query = factory(self)
            self._owns_search_query = False
        else:
            self._search_query = SublimeSearch(
                None,
                self.searchable_columns(),
                self._sort_by_relevance,
                SearchOperator.WHERE,
            )
            self._owns_search_query = True
        return self._search_query

    def set_search_query(self, search_query: SublimeSearch) -> Self:
        self._search_query = search_query
        self._owns_search_query = False
        return self

    def apply_search(self, query: QueryBuilder | Select, search_str: Any) -> Select:
        """Join, select and search a statement over this model.

        No-op (statement returned unchanged) when search is disabled.
        """
        builder = QueryBuilder.coerce(query)
        if not self._searchable_enabled:
            return builder.statement

        self.apply_searchable_joins(builder)

        if not builder.has_select():
            builder.select(f"{builder.from_table or self.table_name}.*")

        statement = self.search_query().set_query(builder).search(search_str)
        logger.debug("model_search_applied", model=self.model.__name__, table=self.table_name)
        return statement

    # Toggles

    def disable_searchable(self) -> Self:
        self._searchable_enabled = False
        return self

    def enable_searchable(self) -> Self:
        self._searchable_enabled = True
        return self

    def is_searchable_enabled(self) -> bool:
        return self._searchable_enabled

    def searchable_sort_by_relevance(self, sort_by_relevance: bool = True) -> Self:
        self._sort_by_relevance = sort_by_relevance
        self.search_query().sort_by_relevance(sort_by_relevance)
        return self

    def should_sort_by_relevance(self) -> bool:
        return self._sort_by_relevance

    # Configuration mutators

    def _columns_changed(self) -> None:
        # A default searcher captured the old columns
        if self._owns_search_query:
            self._search_query = None
            self._owns_search_query = False

    def set_searchable(self, config: Mapping[str, Any]) -> Self:
        """Replace columns, joins and sortable columns from a config mapping."""
        self.set_searchable_columns(config.get("columns"))
        self.set_searchable_joins(config.get("joins"))
        self.set_sortable_columns(config.get("sortable_columns"))
        return self

    def set_searchable_columns(self, columns: ColumnSpec) -> Self:
        self._searchable_columns = ColumnMap(columns)
        self._columns_changed()
        return self

    def set_searchable_joins(self, joins: Mapping[str, Any] | None) -> Self:
        self._searchable_joins = normalize_joins(joins)
        return self

    def set_sortable_columns(self, columns: ColumnSpec) -> Self:
        self._sortable_columns = ColumnMap(columns)
        return self

    def add_searchable(self, config: Mapping[str, Any]) -> Self:
        """Add columns, joins and sortable columns from a config mapping."""
        if columns := config.get("columns"):
            self.add_searchable_columns(columns)
        if joins := config.get("joins"):
            self.add_searchable_joins(joins)
        if columns := config.get("sortable_columns"):
            self.add_sortable_columns(columns)
        return self

    def add_searchable_columns(self, columns: ColumnSpec) -> Self:
        self._searchable_columns = self.searchable_columns().merge(columns)
        self._columns_changed()
        return self

    def add_searchable_joins(self, joins: Mapping[str, Any]) -> Self:
        self._searchable_joins = {**self.searchable_joins(), **normalize_joins(joins)}
        return self

    def add_sortable_columns(self, columns: ColumnSpec) -> Self:
        self._sortable_columns = self.sortable_columns().merge(columns)
        return self

    def __repr__(self) -> str:
        return f"<ModelSearch(model={self.model.__name__}, table={self.table_name})>"
