"""Core services and utilities for searchable."""

from .exceptions import (
    ColumnNotFoundError,
    IndexingError,
    QueryNotSetError,
    UnsupportedJoinError,
)
from .logging import LogContext, get_logger, setup_logging

__all__ = [
    # Exceptions
    "ColumnNotFoundError",
    "IndexingError",
    "QueryNotSetError",
    "UnsupportedJoinError",
    # Logging
    "LogContext",
    "get_logger",
    "setup_logging",
]
