"""Outputer - builds entities handed back to callers from storage data.

Reads real and virtual columns selected by a dot-path field list, keyed
by each column's alias (falling back to its name). Write-only columns
must never appear in the data.

Emptiness pruning:
    A nested entity left without any data is dropped unless it is wanted,
    i.e. its parent column is required and real. Top-level entities are
    always wanted. Entities in nested arrays and maps are never wanted.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from row_mapper.core.columns import Column, get_name, get_nested_fields, is_real
from row_mapper.core.enums import MISSING, Cast, Format, Shape
from row_mapper.core.exceptions import (
    MissingRequiredColumnsError,
    TypeMismatchError,
    WriteOnlyViolation,
)
from row_mapper.core.registry import SCHEMA, Registry
from row_mapper.mapping.helper import is_empty_model, is_record, is_sequence, read_value


class Outputer:
    """Materializes output entities.

    Args:
        registry: Schema registry to read columns from. Defaults to ``SCHEMA``.
    """

    def __init__(self, registry: Registry | None = None) -> None:
        self.registry = registry if registry is not None else SCHEMA

    def create(self, model: type, entry: Any, fields: Sequence[str] = ()) -> Any:
        """Build an entity from ``entry``, restricted to ``fields`` when given."""
        return self._create_entity(model, entry, list(fields), False, True)

    def create_full(self, model: type, entry: Any, fields: Sequence[str] = ()) -> Any:
        """Build an entity, requiring every required column when no fields are given.

        Raises:
            MissingRequiredColumnsError: Listing every absent required column
                of the first incomplete entity.
        """
        return self._create_entity(model, entry, list(fields), not fields, True)

    def create_array(
        self, model: type, entries: list[Any], fields: Sequence[str] = ()
    ) -> list[Any]:
        return self._create_array(model, entries, list(fields), False, True, False)

    def create_map(
        self, model: type, entry: Mapping[str, Any], fields: Sequence[str] = ()
    ) -> dict[str, Any]:
        return self._create_map(model, entry, list(fields), False, True)

    def create_full_array(
        self, model: type, entries: list[Any], fields: Sequence[str] = ()
    ) -> list[Any]:
        return self._create_array(model, entries, list(fields), not fields, True, False)

    def create_full_map(
        self, model: type, entry: Mapping[str, Any], fields: Sequence[str] = ()
    ) -> dict[str, Any]:
        return self._create_map(model, entry, list(fields), not fields, True)

    def _create_array(
        self,
        model: type,
        entries: list[Any],
        fields: list[str],
        required: bool,
        wanted: bool,
        multiple: bool,
    ) -> list[Any]:
        items = []
        for entry in entries:
            if multiple and is_sequence(entry):
                entity = self._create_array(model, entry, fields, required, wanted, False)
            else:
                entity = self._create_entity(model, entry, fields, required, wanted)
            if entity is not MISSING:
                items.append(entity)
        return items

    def _create_map(
        self,
        model: type,
        entry: Mapping[str, Any],
        fields: list[str],
        required: bool,
        wanted: bool,
    ) -> dict[str, Any]:
        items = {}
        for key, value in entry.items():
            entity = self._create_entity(model, value, fields, required, wanted)
            if entity is not MISSING:
                items[key] = entity
        return items

    def _create_value(
        self, model: type, column: Column, value: Any, fields: list[str], required: bool
    ) -> Any:
        if value is None and Format.NULL in column.formats:
            return column.caster(value, Cast.OUTPUT)
        nested = column.model is not None and self.registry.is_entity(column.model)
        if nested:
            nested_fields = get_nested_fields(column, fields) if fields else []
            nested_required = required and not nested_fields
            resolved = self.registry.get_entity_model(column.model)
        match column.shape:
            case Shape.ARRAY:
                if not is_sequence(value):
                    raise TypeMismatchError(column.name, self.registry.get_label(model), "an array")
                if nested:
                    multiple = getattr(column, "all", False)
                    return self._create_array(
                        resolved, value, nested_fields, nested_required, False, multiple
                    )
            case Shape.MAP:
                if not isinstance(value, Mapping):
                    raise TypeMismatchError(column.name, self.registry.get_label(model), "a map")
                if nested:
                    return self._create_map(resolved, value, nested_fields, nested_required, False)
            case Shape.OBJECT:
                if nested:
                    if not is_record(value):
                        raise TypeMismatchError(
                            column.name, self.registry.get_label(model), "an object"
                        )
                    wanted = column.required and is_real(column)
                    return self._create_entity(
                        resolved, value, nested_fields, nested_required, wanted
                    )
            case Shape.SCALAR:
                pass
        return column.caster(value, Cast.OUTPUT)

    def _create_entity(
        self, model: type, entry: Any, fields: list[str], required: bool, wanted: bool
    ) -> Any:
        entity = model()
        missing = []
        for name, column in self.registry.get_rows(model, *fields).items():
            value = read_value(entry, get_name(column))
            if value is MISSING and column.alias:
                value = read_value(entry, name)
            if value is MISSING:
                if required and column.required and not column.write_only:
                    missing.append(name)
                continue
            if column.write_only:
                raise WriteOnlyViolation(name, self.registry.get_label(model))
            result = self._create_value(model, column, value, fields, required)
            if result is not MISSING:
                setattr(entity, name, result)
        if not wanted and is_empty_model(self.registry, model, entity, 0):
            return MISSING
        if missing:
            raise MissingRequiredColumnsError(missing, self.registry.get_label(model))
        return entity
