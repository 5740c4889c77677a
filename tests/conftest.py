"""Pytest fixtures for searchable tests."""

from collections.abc import AsyncGenerator, Generator
from unittest.mock import patch

import pytest
import pytest_asyncio
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from searchable.config.settings import RelevanceConfig, Settings
from searchable.db.models.base import Base
from searchable.db.schema import set_column_cache

# Registers the test models on Base.metadata
import search_fixtures  # noqa: F401


# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def reset_column_cache() -> Generator[None, None, None]:
    """Give every test a fresh process-wide column cache."""
    set_column_cache(None)
    yield
    set_column_cache(None)


@pytest.fixture
def mock_settings() -> Settings:
    """Create mock settings for testing."""
    return Settings(
        ENVIRONMENT="test",
        log_level="DEBUG",
        relevance=RelevanceConfig(enabled=True, not_found_rank=1000),
        fulltext_result_limit=10,
    )


@pytest.fixture
def patch_settings(mock_settings: Settings) -> Generator[Settings, None, None]:
    """Patch get_settings everywhere it is imported."""
    targets = [
        "searchable.config.settings.get_settings",
        "searchable.search.base.get_settings",
        "searchable.search.relevance.get_settings",
        "searchable.search.searchable.get_settings",
        "searchable.fulltext.search.get_settings",
        "searchable.core.logging.get_settings",
    ]
    patchers = [patch(target, return_value=mock_settings) for target in targets]
    for patcher in patchers:
        patcher.start()
    yield mock_settings
    for patcher in patchers:
        patcher.stop()


# Database fixtures


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()
