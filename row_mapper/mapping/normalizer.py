"""Normalizer - converts materialized entities into plain dicts."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from row_mapper.core.columns import Column, get_name
from row_mapper.core.enums import MISSING, Cast, Format, Shape
from row_mapper.core.exceptions import TypeMismatchError
from row_mapper.core.registry import SCHEMA, Registry
from row_mapper.mapping.helper import is_record, is_sequence, read_value


class Normalizer:
    """Materializes plain, transferable data from entities.

    Args:
        registry: Schema registry to read columns from. Defaults to ``SCHEMA``.
    """

    def __init__(self, registry: Registry | None = None) -> None:
        self.registry = registry if registry is not None else SCHEMA

    def create(
        self,
        model: type,
        entity: Any,
        alias: bool = False,
        unsafe: bool = False,
        unroll: bool = False,
    ) -> dict[str, Any]:
        """Normalize one entity.

        Args:
            model: Entity model.
            entity: Entity instance (or any record carrying its columns).
            alias: Key each value by the column alias instead of its name.
            unsafe: Include hidden columns.
            unroll: Flatten nested single entities into dot-joined keys.
                    Arrays and maps keep their structure.

        Returns:
            A dict holding every set, visible column.
        """
        data: dict[str, Any] = {}
        for name, column in self.registry.get_rows(model).items():
            if column.hidden and not unsafe:
                continue
            value = read_value(entity, name)
            if value is MISSING:
                continue
            value = column.caster(value, Cast.NORMALIZE)
            result = self._create_value(model, column, value, alias, unsafe, unroll)
            if result is MISSING:
                continue
            key = get_name(column) if alias else name
            if unroll and column.shape is Shape.OBJECT and isinstance(result, dict):
                for path, item in result.items():
                    data[f"{key}.{path}"] = item
            else:
                data[key] = result
        return data

    def create_array(
        self,
        model: type,
        entities: list[Any],
        alias: bool = False,
        unsafe: bool = False,
        unroll: bool = False,
    ) -> list[Any]:
        return self._create_array(model, entities, False, alias, unsafe, unroll)

    def _create_array(
        self,
        model: type,
        entities: list[Any],
        multiple: bool,
        alias: bool,
        unsafe: bool,
        unroll: bool,
    ) -> list[Any]:
        items = []
        for entity in entities:
            if multiple and is_sequence(entity):
                items.append(self._create_array(model, entity, False, alias, unsafe, unroll))
            else:
                items.append(self.create(model, entity, alias, unsafe, unroll))
        return items

    def _create_value(
        self,
        model: type,
        column: Column,
        value: Any,
        alias: bool,
        unsafe: bool,
        unroll: bool,
    ) -> Any:
        if value is None and Format.NULL in column.formats:
            return value
        nested = column.model is not None and self.registry.is_entity(column.model)
        match column.shape:
            case Shape.ARRAY:
                if not is_sequence(value):
                    raise TypeMismatchError(column.name, self.registry.get_label(model), "an array")
                if nested:
                    resolved = self.registry.get_entity_model(column.model)
                    multiple = getattr(column, "all", False)
                    return self._create_array(resolved, value, multiple, alias, unsafe, unroll)
                return list(value)
            case Shape.MAP:
                if not isinstance(value, Mapping):
                    raise TypeMismatchError(column.name, self.registry.get_label(model), "a map")
                if nested:
                    resolved = self.registry.get_entity_model(column.model)
                    return {
                        key: self.create(resolved, item, alias, unsafe, unroll)
                        for key, item in value.items()
                    }
                return dict(value)
            case Shape.OBJECT:
                if nested:
                    if not is_record(value):
                        raise TypeMismatchError(
                            column.name, self.registry.get_label(model), "an object"
                        )
                    resolved = self.registry.get_entity_model(column.model)
                    return self.create(resolved, value, alias, unsafe, unroll)
            case Shape.SCALAR:
                pass
        return value
