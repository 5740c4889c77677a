"""Custom exceptions for searchable."""


class SearchableError(Exception):
    """Base exception for all searchable errors."""

    pass


class SearchError(SearchableError):
    """Error during search query construction."""

    pass


class ConfigurationError(SearchableError):
    """Error in configuration or settings."""

    pass
