"""Indexable models: the protocol and how index rows identify them."""

from typing import Any, Protocol, runtime_checkable

from sqlalchemy import inspect

from searchable.core.exceptions import IndexingError

IDENTITY_SEPARATOR = ":"


@runtime_checkable
class Indexable(Protocol):
    """A model that provides its own full-text index title and content."""

    def get_index_title(self) -> str: ...

    def get_index_content(self) -> str: ...


def indexable_type_of(model: Any) -> str:
    """Type key stored in the index for a model class or instance.

    Defaults to the class name; a model may set ``__indexable_type__``.
    """
    cls = model if isinstance(model, type) else type(model)
    return getattr(cls, "__indexable_type__", None) or cls.__name__


def indexable_id_of(obj: Any) -> str:
    """Primary key of a persisted model instance, as stored in the index.

    Composite keys are joined with ``:``.

    Raises:
        IndexingError: If the instance has no primary key yet
    """
    mapper = inspect(type(obj))
    values = mapper.primary_key_from_instance(obj)
    if not values or any(value is None for value in values):
        raise IndexingError(indexable_type_of(obj), "instance has no primary key")
    return IDENTITY_SEPARATOR.join(str(value) for value in values)


def coerce_indexable_id(model: type, indexable_id: str) -> Any:
    """Convert a stored index id back to the model's primary key value(s)."""
    pk_columns = inspect(model).primary_key
    parts = indexable_id.split(IDENTITY_SEPARATOR) if len(pk_columns) > 1 else [indexable_id]

    values: list[Any] = []
    for column, part in zip(pk_columns, parts, strict=True):
        try:
            values.append(column.type.python_type(part))
        except NotImplementedError:
            values.append(part)
    return values[0] if len(values) == 1 else tuple(values)
