"""Utility modules for searchable."""

from searchable.utils.exceptions import (
    ConfigurationError,
    SearchableError,
    SearchError,
)

__all__ = [
    "SearchableError",
    "SearchError",
    "ConfigurationError",
]
