"""Application settings loaded from environment variables."""

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class JoinKind(str, Enum):
    """Join kinds a searchable join declaration may use."""

    LEFT = "left"
    INNER = "inner"
    FULL = "full"


class RelevanceConfig(BaseModel):
    """Configuration for relevance ordering of search results."""

    enabled: bool = True
    """Sort searches by relevance unless a searcher overrides it."""

    not_found_rank: int = Field(default=1_000_000, gt=0)
    """Rank used when the search string does not occur in a column.

    Rows matching the fuzzy pattern but not the literal string get this rank,
    rows matching neither get not_found_rank + 1.
    """


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SEARCHABLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    ENVIRONMENT: Literal["development", "test", "production"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Search behaviour
    relevance: RelevanceConfig = RelevanceConfig()
    default_join_kind: JoinKind = JoinKind.LEFT

    # Full-text index
    fulltext_result_limit: int = Field(default=50, gt=0)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
