"""RowMapper exception hierarchy.

Schema errors surface at registration or lookup time; entity errors
surface while materializing data. Nothing here is retried.
"""

from __future__ import annotations

from collections.abc import Sequence


class RowMapperError(Exception):
    """Base exception for all RowMapper errors."""


# --- Schema ---


class SchemaError(RowMapperError):
    """Base for schema registration and lookup errors."""


class InvalidModelError(SchemaError):
    """Raised when a model input doesn't resolve to a registered entity."""

    def __init__(self, model: object, detail: str = "is not a registered entity") -> None:
        self.model = model
        name = getattr(model, "__name__", repr(model))
        super().__init__(f"Model '{name}' {detail}")


class ColumnNotFoundError(SchemaError):
    """Raised when a column name is not declared on an entity."""

    def __init__(self, column: str, storage: str) -> None:
        self.column = column
        self.storage = storage
        super().__init__(f"Column '{column}@{storage}' does not exist")


class NoPrimaryColumnError(SchemaError):
    """Raised when an entity has no primary column."""

    def __init__(self, storage: str) -> None:
        self.storage = storage
        super().__init__(f"Entity '{storage}' has no primary column")


class ConflictingAccessModifierError(SchemaError):
    """Raised when a column is declared both read-only and write-only."""

    def __init__(self, column: str, storage: str, modifier: str, existing: str) -> None:
        self.column = column
        self.storage = storage
        super().__init__(f"Column '{column}@{storage}' is already {existing}, cannot be {modifier}")


class ColumnConflictError(SchemaError):
    """Raised on a real/virtual name clash or a second primary column."""

    def __init__(self, column: str, storage: str, detail: str) -> None:
        self.column = column
        self.storage = storage
        super().__init__(f"Column '{column}@{storage}' {detail}")


class RegistryFrozenError(SchemaError):
    """Raised on any registration attempt after the registry was frozen."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Cannot {action}: registry is frozen")


# --- Entity ---


class EntityError(RowMapperError):
    """Base for entity materialization errors."""


class MissingRequiredColumnError(EntityError):
    """Raised when a required column wasn't given."""

    def __init__(self, column: str, storage: str) -> None:
        self.column = column
        self.storage = storage
        super().__init__(f"Required column '{column}@{storage}' wasn't given")


class MissingRequiredColumnsError(EntityError):
    """Raised with every missing required column of one entity at once."""

    def __init__(self, columns: Sequence[str], storage: str) -> None:
        self.columns = list(columns)
        self.storage = storage
        super().__init__(f"Required columns '[{','.join(self.columns)}]@{storage}' weren't given")


class EntityNotFoundError(EntityError):
    """Raised when no entity has the requested primary value."""

    def __init__(self, id: object, storage: str) -> None:  # noqa: A002
        self.id = id
        self.storage = storage
        super().__init__(f"Entity {id!r}@{storage} was not found")


class ReadOnlyViolation(EntityError):
    """Raised when input data supplies a read-only column."""

    def __init__(self, column: str, storage: str) -> None:
        self.column = column
        self.storage = storage
        super().__init__(f"Input column '{column}@{storage}' is read-only")


class WriteOnlyViolation(EntityError):
    """Raised when output data carries a write-only column."""

    def __init__(self, column: str, storage: str) -> None:
        self.column = column
        self.storage = storage
        super().__init__(f"Output column '{column}@{storage}' is write-only")


class TypeMismatchError(EntityError, TypeError):
    """Raised when a value's runtime shape disagrees with the column shape."""

    def __init__(self, column: str, storage: str, expected: str) -> None:
        self.column = column
        self.storage = storage
        self.expected = expected
        super().__init__(f"Column '{column}@{storage}' must be {expected}")


class InvalidValueError(EntityError, ValueError):
    """Raised when an assigned value matches none of the column formats."""

    def __init__(self, column: str, storage: str, value: object) -> None:
        self.column = column
        self.storage = storage
        self.value = value
        super().__init__(f"Invalid value {value!r} for column '{column}@{storage}'")
