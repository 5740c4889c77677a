"""Search operators: which clause a search condition is added to."""

from enum import Enum

from searchable.utils.exceptions import ConfigurationError


class SearchOperator(str, Enum):
    """Clause used to compare columns against the search pattern.

    - WHERE: compares the raw column expressions
    - HAVING: compares the output column names (aliases), which must exist
      in the SELECT list
    """

    WHERE = "where"
    HAVING = "having"

    @classmethod
    def coerce(cls, value: "str | SearchOperator") -> "SearchOperator":
        """Convert a string to a SearchOperator.

        Raises:
            ConfigurationError: If the value is not a known operator
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown search operator '{value}', expected one of "
                f"{[op.value for op in cls]}"
            ) from e
