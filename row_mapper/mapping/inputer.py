"""Inputer - builds entities bound for storage from caller-supplied data.

Only real columns are read. Read-only columns must not be supplied, and
in full mode every required column that isn't read-only must be.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from row_mapper.core.columns import Column
from row_mapper.core.enums import MISSING, Cast, Format, Shape
from row_mapper.core.exceptions import (
    MissingRequiredColumnError,
    ReadOnlyViolation,
    TypeMismatchError,
)
from row_mapper.core.registry import SCHEMA, Registry
from row_mapper.mapping.helper import is_record, is_sequence, read_value


class Inputer:
    """Materializes input entities.

    Args:
        registry: Schema registry to read columns from. Defaults to ``SCHEMA``.
    """

    def __init__(self, registry: Registry | None = None) -> None:
        self.registry = registry if registry is not None else SCHEMA

    def create(self, model: type, entry: Any) -> Any:
        """Build an entity, tolerating missing required columns."""
        return self._create_entity(model, entry, False)

    def create_full(self, model: type, entry: Any) -> Any:
        """Build an entity with every required column.

        Raises:
            MissingRequiredColumnError: On the first required column absent
                from ``entry``.
        """
        return self._create_entity(model, entry, True)

    def create_array(self, model: type, entries: list[Any]) -> list[Any]:
        return self._create_array(model, entries, False, False)

    def create_map(self, model: type, entry: Mapping[str, Any]) -> dict[str, Any]:
        return self._create_map(model, entry, False)

    def create_full_array(self, model: type, entries: list[Any]) -> list[Any]:
        return self._create_array(model, entries, True, False)

    def create_full_map(self, model: type, entry: Mapping[str, Any]) -> dict[str, Any]:
        return self._create_map(model, entry, True)

    def _create_array(
        self, model: type, entries: list[Any], required: bool, multiple: bool
    ) -> list[Any]:
        items = []
        for entry in entries:
            if multiple and is_sequence(entry):
                items.append(self._create_array(model, entry, required, False))
            else:
                items.append(self._create_entity(model, entry, required))
        return items

    def _create_map(self, model: type, entry: Mapping[str, Any], required: bool) -> dict[str, Any]:
        return {
            key: self._create_entity(model, value, required)
            for key, value in entry.items()
            if value is not MISSING
        }

    def _create_value(self, model: type, column: Column, value: Any, required: bool) -> Any:
        if value is None and Format.NULL in column.formats:
            return column.caster(value, Cast.INPUT)
        nested = column.model is not None and self.registry.is_entity(column.model)
        match column.shape:
            case Shape.ARRAY:
                if not is_sequence(value):
                    raise TypeMismatchError(column.name, self.registry.get_label(model), "an array")
                if nested:
                    resolved = self.registry.get_entity_model(column.model)
                    multiple = getattr(column, "all", False)
                    return self._create_array(resolved, value, required, multiple)
            case Shape.MAP:
                if not isinstance(value, Mapping):
                    raise TypeMismatchError(column.name, self.registry.get_label(model), "a map")
                if nested:
                    resolved = self.registry.get_entity_model(column.model)
                    return self._create_map(resolved, value, required)
            case Shape.OBJECT:
                if nested:
                    if not is_record(value):
                        raise TypeMismatchError(
                            column.name, self.registry.get_label(model), "an object"
                        )
                    resolved = self.registry.get_entity_model(column.model)
                    return self._create_entity(resolved, value, required)
            case Shape.SCALAR:
                pass
        return column.caster(value, Cast.INPUT)

    def _create_entity(self, model: type, entry: Any, required: bool) -> Any:
        entity = model()
        for name, column in self.registry.get_real_row(model).items():
            value = read_value(entry, name)
            if value is MISSING:
                if required and column.required and not column.read_only:
                    raise MissingRequiredColumnError(name, self.registry.get_label(model))
                continue
            if column.read_only:
                raise ReadOnlyViolation(name, self.registry.get_label(model))
            result = self._create_value(model, column, value, required)
            if result is not MISSING:
                setattr(entity, name, result)
        return entity
