"""Unit tests for grid queries and search queries built on them."""

import pytest
from sqlalchemy import select

from searchable.core.exceptions import ColumnNotFoundError, QueryNotSetError
from searchable.search.base import BaseSearchQuery
from searchable.search.grid import BaseGridQuery, GridQuery, make_select
from searchable.search.operators import SearchOperator
from searchable.utils.exceptions import ConfigurationError
from search_fixtures import Post, User, compile_sql

# =============================================================================
# Grid definitions
# =============================================================================


class PostGrid(BaseSearchQuery):
    """Posts with their author's name."""

    def init_query(self):
        return select().select_from(Post.__table__).join(User.__table__, Post.user_id == User.id)

    def columns(self):
        return {"author": "users.name", 0: "posts.title"}


class TitleSortedPostGrid(PostGrid):
    """Posts ranked by title only."""

    def sort_columns(self):
        return ["posts.title"]


class QuerylessGrid(BaseSearchQuery):
    """A grid that never declares its query."""

    def columns(self):
        return ["posts.title"]


class UnsortableGrid(PostGrid):
    """A grid without sort columns."""

    def sort_columns(self):
        return []


class TestMakeSelect:
    """Tests for SELECT list generation."""

    def test_aliases_and_positionals(self):
        """Test aliased entries are labelled and positional ones are raw."""
        items = make_select({"author": "users.name", 0: "posts.title"})
        sql = compile_sql(select(*items))

        assert sql.startswith("SELECT users.name AS author, posts.title")


class TestBaseGridQuery:
    """Tests for BaseGridQuery."""

    def test_make_query(self):
        """Test the declared columns become the SELECT list."""
        sql = compile_sql(PostGrid.make().make_query())

        assert sql.startswith("SELECT users.name AS author, posts.title")
        assert "FROM posts JOIN users ON posts.user_id = users.id" in sql

    def test_query_is_created_once(self):
        """Test init_query runs only on first use."""
        grid = PostGrid()

        assert not grid.has_query()
        assert grid.query() is grid.query()
        assert grid.has_query()

    def test_missing_init_query(self):
        """Test grids without init_query raise QueryNotSetError."""
        with pytest.raises(QueryNotSetError) as exc_info:
            QuerylessGrid().make_query()

        assert exc_info.value.operation == "init_query"
        assert exc_info.value.owner == "QuerylessGrid"

    def test_set_query(self):
        """Test a query can be bound explicitly."""
        grid = QuerylessGrid().set_query(select().select_from(Post.__table__))

        assert compile_sql(grid.make_query()).startswith("SELECT posts.title")

    def test_set_select_query(self):
        """Test the SELECT list can be applied to another statement."""
        sql = compile_sql(PostGrid().set_select_query(select(Post)))

        assert sql.startswith("SELECT users.name AS author, posts.title")

    def test_get_column(self):
        """Test column keys resolve to expressions."""
        grid = PostGrid()

        assert grid.get_column("author") == "users.name"
        assert grid.get_columns(["title", "author"]) == ["posts.title", "users.name"]

    def test_get_unknown_column(self):
        """Test unknown column keys raise ColumnNotFoundError."""
        with pytest.raises(ColumnNotFoundError):
            PostGrid().get_column("email")

    def test_protocol(self):
        """Test grids satisfy the GridQuery protocol."""
        assert isinstance(PostGrid(), GridQuery)

    def test_abstract_columns(self):
        """Test columns() must be declared."""
        with pytest.raises(TypeError):
            BaseGridQuery()


class TestBaseSearchQuery:
    """Tests for searching grid queries."""

    def test_search_filters_grid_query(self):
        """Test the search condition lands on the grid's own query."""
        grid = PostGrid(sort=False)
        grid.search("al")
        sql = compile_sql(grid.make_query())

        assert sql.startswith("SELECT users.name AS author, posts.title")
        assert "WHERE (users.name LIKE '%a%l%' OR posts.title LIKE '%a%l%')" in sql

    def test_search_sorts_by_all_columns(self):
        """Test relevance ordering uses the declared columns by default."""
        sql = compile_sql(PostGrid(sort=True).search("al"))

        assert sql.count("CASE WHEN") == 2

    def test_sort_columns_override(self):
        """Test sort_columns narrows relevance ordering."""
        sql = compile_sql(TitleSortedPostGrid(sort=True).search("al"))

        order_by = sql[sql.index("ORDER BY") :]
        assert order_by.count("CASE WHEN") == 1
        assert "users.name" not in order_by

    def test_having_operator(self):
        """Test grids can search in HAVING."""
        grid = PostGrid(sort=False, search_operator="having")
        grid.query().group_by("users.name", "posts.title")

        assert "HAVING (author LIKE '%a%' OR title LIKE '%a%')" in compile_sql(grid.search("a"))

    def test_set_search_operator(self):
        """Test the operator can be changed after construction."""
        grid = PostGrid().set_search_operator("having")

        assert grid.search_operator is SearchOperator.HAVING

    def test_search_remembers_search_str(self):
        """Test the last search string is kept on the grid."""
        grid = PostGrid(sort=False)
        grid.search("al")

        assert grid.search_str == "al"

    def test_apply_sort_without_query(self):
        """Test relevance ordering needs a bound query."""
        with pytest.raises(QueryNotSetError):
            QuerylessGrid(sort=True).apply_sort_by_relevance()

    def test_apply_sort_without_sort_columns(self):
        """Test relevance ordering needs sort columns."""
        grid = UnsortableGrid(sort=True)
        grid.query()

        with pytest.raises(ConfigurationError, match="requires sort columns"):
            grid.apply_sort_by_relevance()
