"""Core exceptions for search query construction and indexing."""

from searchable.utils.exceptions import ConfigurationError, SearchError


class QueryNotSetError(ConfigurationError):
    """Raised when a search or grid operation runs without a bound query.

    This error indicates a programming error - the searcher was asked to build
    SQL before set_query() was called or init_query() was implemented.

    Attributes:
        operation: The operation that needed the query
        owner: Name of the class that owns the missing query
    """

    def __init__(self, operation: str = "search", owner: str | None = None):
        owner_part = f" on {owner}" if owner else ""
        super().__init__(f"Query not set. Cannot run {operation}{owner_part}.")
        self.operation = operation
        self.owner = owner

    def __str__(self) -> str:
        return f"QueryNotSetError: {self.args[0]}"


class ColumnNotFoundError(SearchError):
    """Raised when a logical column key does not match any column expression.

    Attributes:
        column_key: The key that could not be resolved
        available: The column expressions that were searched
    """

    def __init__(self, column_key: str, available: list[str] | None = None):
        super().__init__(f"Column not found: {column_key}")
        self.column_key = column_key
        self.available = list(available or [])

    def __str__(self) -> str:
        return f"ColumnNotFoundError: {self.args[0]} (available={self.available})"


class UnsupportedJoinError(ConfigurationError):
    """Raised when a searchable join declares a join kind that cannot be built.

    Attributes:
        table: The join target table
        kind: The requested join kind
    """

    def __init__(self, table: str, kind: str):
        super().__init__(f"Unsupported join kind '{kind}' for table {table}")
        self.table = table
        self.kind = kind

    def __str__(self) -> str:
        return f"UnsupportedJoinError: {self.args[0]}"


class IndexingError(SearchError):
    """Raised when a model cannot be written to the full-text index.

    Attributes:
        indexable_type: The model type being indexed
        reason: Why the record could not be indexed
    """

    def __init__(self, indexable_type: str, reason: str):
        super().__init__(f"Cannot index {indexable_type}: {reason}")
        self.indexable_type = indexable_type
        self.reason = reason

    def __str__(self) -> str:
        return f"IndexingError: {self.args[0]}"
