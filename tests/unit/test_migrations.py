"""Unit tests for the alembic migrations."""

import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from searchable.db.models.indexed_record import IndexedRecord

VERSIONS_DIR = Path(__file__).resolve().parents[2] / "migrations" / "versions"


def load_migration(filename: str):
    """Import a migration module from the versions directory."""
    path = VERSIONS_DIR / filename
    spec = importlib.util.spec_from_file_location(path.stem, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def fulltext_migration():
    return load_migration("001_create_fulltext_index.py")


class TestFulltextIndexMigration:
    """Tests for the full-text index table migration."""

    def test_revision(self, fulltext_migration):
        """Test the migration starts the revision chain."""
        assert fulltext_migration.revision == "001"
        assert fulltext_migration.down_revision is None

    def test_upgrade_matches_model(self, fulltext_migration):
        """Test the migrated table has the model's columns and indexes."""
        engine = create_engine("sqlite://")
        with engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                fulltext_migration.upgrade()

            inspector = inspect(conn)
            columns = [column["name"] for column in inspector.get_columns("fulltext_index")]
            indexes = [index["name"] for index in inspector.get_indexes("fulltext_index")]

        assert sorted(columns) == sorted(column.name for column in IndexedRecord.__table__.columns)
        assert "idx_fulltext_type" in indexes
        engine.dispose()

    def test_downgrade(self, fulltext_migration):
        """Test the downgrade drops the table."""
        engine = create_engine("sqlite://")
        with engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                fulltext_migration.upgrade()
                fulltext_migration.downgrade()

            assert "fulltext_index" not in inspect(conn).get_table_names()
        engine.dispose()
