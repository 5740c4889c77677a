"""Integration tests for the full-text index and global search."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from searchable.core.exceptions import IndexingError
from searchable.db.models.indexed_record import IndexedRecord
from searchable.db.repositories.indexed_record import IndexedRecordRepository
from searchable.fulltext.indexer import (
    Indexer,
    disable_index_sync,
    enable_index_sync,
    is_index_sync_enabled,
)
from searchable.fulltext.search import FulltextSearch
from search_fixtures import Article, User

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def article_sync():
    """Keep the index in sync with Article for one test."""
    enable_index_sync(Article)
    yield
    disable_index_sync(Article)


async def add_articles(db: AsyncSession, *articles: Article) -> list[Article]:
    """Persist articles without touching the index."""
    db.add_all(articles)
    await db.commit()
    return list(articles)


class TestIndexer:
    """Tests for explicit indexing."""

    @pytest.mark.asyncio
    async def test_index_model(self, db_session):
        """Test an index record is created from the model."""
        (article,) = await add_articles(
            db_session, Article(headline="Control panel", text="Settings")
        )

        record = await Indexer(db_session).index_model(article)

        assert record.indexable_type == "Article"
        assert record.indexable_id == str(article.id)
        assert record.indexed_title == "Control panel"
        assert record.indexed_content == "Settings"

    @pytest.mark.asyncio
    async def test_reindex_updates_in_place(self, db_session):
        """Test indexing twice keeps a single record."""
        (article,) = await add_articles(db_session, Article(headline="Old", text=""))
        indexer = Indexer(db_session)
        await indexer.index_model(article)

        article.headline = "New"
        await db_session.commit()
        await indexer.index_model(article)

        repo = IndexedRecordRepository(db_session)
        assert await repo.count("Article") == 1
        record = await repo.get_for("Article", str(article.id))
        assert record.indexed_title == "New"

    @pytest.mark.asyncio
    async def test_not_indexable(self, db_session):
        """Test models without index methods are rejected."""
        user = User(name="alice", email="")
        db_session.add(user)
        await db_session.commit()

        with pytest.raises(IndexingError, match="get_index_title"):
            await Indexer(db_session).index_model(user)

    @pytest.mark.asyncio
    async def test_unindex_model(self, db_session):
        """Test removing an index record reports whether one existed."""
        (article,) = await add_articles(db_session, Article(headline="A", text=""))
        indexer = Indexer(db_session)
        await indexer.index_model(article)

        assert await indexer.unindex_model(article) is True
        assert await indexer.unindex_model(article) is False

    @pytest.mark.asyncio
    async def test_index_and_unindex_all(self, db_session):
        """Test rebuilding and clearing every record of a model."""
        await add_articles(
            db_session,
            Article(headline="A", text=""),
            Article(headline="B", text=""),
        )
        indexer = Indexer(db_session)

        assert await indexer.index_all(Article) == 2
        assert await indexer.records.count("Article") == 2

        assert await indexer.unindex_all(Article) == 2
        assert await indexer.records.count() == 0


class TestIndexSync:
    """Tests for syncing the index on flush."""

    def test_enable_is_idempotent(self, article_sync):
        """Test enabling twice registers the listeners once."""
        enable_index_sync(Article)

        assert is_index_sync_enabled(Article)

    def test_disable(self):
        """Test sync can be switched off."""
        enable_index_sync(Article)
        disable_index_sync(Article)

        assert not is_index_sync_enabled(Article)

    @pytest.mark.asyncio
    async def test_insert_update_delete(self, db_session, article_sync):
        """Test the index follows inserts, updates and deletes."""
        repo = IndexedRecordRepository(db_session)
        article = Article(headline="Draft", text="body")
        db_session.add(article)
        await db_session.commit()
        article_id = str(article.id)

        record = await repo.get_for("Article", article_id)
        assert record is not None
        assert record.indexed_title == "Draft"

        article.headline = "Published"
        await db_session.commit()
        db_session.expire(record)

        record = await repo.get_for("Article", article_id)
        assert record.indexed_title == "Published"

        await db_session.delete(article)
        await db_session.commit()

        assert await repo.get_for("Article", article_id) is None

    @pytest.mark.asyncio
    async def test_non_indexable_models_ignored(self, db_session):
        """Test sync on a non-indexable model writes nothing."""
        enable_index_sync(User)
        try:
            db_session.add(User(name="alice", email=""))
            await db_session.commit()

            assert await IndexedRecordRepository(db_session).count() == 0
        finally:
            disable_index_sync(User)


class TestFulltextSearch:
    """Tests for global search over the index."""

    @pytest.fixture
    async def indexed(self, db_session):
        articles = await add_articles(
            db_session,
            Article(headline="Nothing", text="control panel"),
            Article(headline="Control panel", text="x"),
            Article(headline="Other", text="zzz"),
        )
        await Indexer(db_session).index_models(articles)
        db_session.add(
            IndexedRecord(
                indexable_type="Note",
                indexable_id="1",
                indexed_title="Control panel notes",
                indexed_content="",
            )
        )
        await db_session.commit()
        return articles

    @pytest.mark.asyncio
    async def test_title_match_ranks_first(self, db_session, indexed):
        """Test title matches rank above content matches."""
        records = await FulltextSearch(sort=True).run(db_session, "cp")

        titles = [record.indexed_title for record in records]
        assert titles[-1] == "Nothing"
        assert set(titles[:2]) == {"Control panel", "Control panel notes"}

    @pytest.mark.asyncio
    async def test_run_for_class(self, db_session, indexed):
        """Test searching a single model type."""
        records = await FulltextSearch().run_for_class(db_session, "cp", Article)

        assert [record.indexed_title for record in records] == ["Control panel", "Nothing"]

    @pytest.mark.asyncio
    async def test_limit(self, db_session, indexed):
        """Test results are limited."""
        records = await FulltextSearch(limit=1).run(db_session, "cp")

        assert len(records) == 1

    @pytest.mark.asyncio
    async def test_no_match(self, db_session, indexed):
        """Test searches without matches return nothing."""
        assert await FulltextSearch().run(db_session, "qqq") == []

    @pytest.mark.asyncio
    async def test_load_indexables(self, db_session, indexed):
        """Test records resolve to their models in result order."""
        fulltext = FulltextSearch()
        records = await fulltext.run(db_session, "cp")
        records.append(
            IndexedRecord(indexable_type="Article", indexable_id="999", indexed_title="gone")
        )

        articles = await fulltext.load_indexables(db_session, records, [Article])

        assert all(isinstance(article, Article) for article in articles)
        assert [article.headline for article in articles] == ["Control panel", "Nothing"]
