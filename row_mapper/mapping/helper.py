"""Value access and emptiness helpers shared by the materializers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from row_mapper.core.enums import MISSING, Shape
from row_mapper.core.registry import Registry


def read_value(entry: Any, key: str) -> Any:
    """Read ``key`` from a mapping or an object, MISSING when absent."""
    if isinstance(entry, Mapping):
        return entry.get(key, MISSING)
    return getattr(entry, key, MISSING)


def is_record(value: Any) -> bool:
    """Check whether ``value`` can be read column by column."""
    if isinstance(value, Mapping):
        return True
    return hasattr(value, "__dict__") and not isinstance(value, type)


def is_sequence(value: Any) -> bool:
    return isinstance(value, list | tuple)


def is_empty_model(registry: Registry, model: type, entity: Any, depth: int = 8) -> bool:
    """Check whether no column of ``entity`` carries data.

    Nested entities are inspected up to ``depth`` levels; anything deeper
    counts as data. None counts as empty.
    """
    for name, column in registry.get_rows(model).items():
        value = read_value(entity, name)
        if value is MISSING or value is None:
            continue
        nested = column.model is not None and registry.is_entity(column.model)
        if is_sequence(value):
            if nested:
                resolved = registry.get_entity_model(column.model)
                for item in value:
                    if not is_empty_model(registry, resolved, item, depth - 1):
                        return False
            elif len(value) > 0:
                return False
        elif nested and column.shape is Shape.MAP and isinstance(value, Mapping):
            resolved = registry.get_entity_model(column.model)
            for item in value.values():
                if not is_empty_model(registry, resolved, item, depth - 1):
                    return False
        elif nested and is_record(value):
            if depth < 0:
                return False
            resolved = registry.get_entity_model(column.model)
            if not is_empty_model(registry, resolved, value, depth - 1):
                return False
        elif isinstance(value, dict):
            if value:
                return False
        else:
            return False
    return True
