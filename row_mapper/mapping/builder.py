"""Entity registration DSL.

Provides a fluent builder for declaring entity columns::

    (
        define(User, "users")
        .id("id").primary("id")
        .string("name", minimum=1).required("name")
        .string("email").hidden("email")
    )

Every method writes straight into the registry and returns the builder.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from row_mapper.core.columns import Caster
from row_mapper.core.enums import Format
from row_mapper.core.exceptions import ColumnNotFoundError, ConflictingAccessModifierError
from row_mapper.core.registry import SCHEMA, Registry
from row_mapper.core.validators import (
    AnyValue,
    ArrayOf,
    Binary,
    Boolean,
    Date,
    Decimal,
    Enumeration,
    Integer,
    InstanceOf,
    MapOf,
    ModelInput,
    Null,
    Number,
    Pattern,
    String,
    Timestamp,
)


def define(
    model: type,
    name: str | None = None,
    *,
    parent: type | None = None,
    registry: Registry | None = None,
) -> EntityBuilder:
    """Entry point for the registration DSL.

    Args:
        model: The entity class.
        name: Storage name (table, collection). May be given later
              with ``.entity()`` or inherited from a parent entity.
        parent: Explicit parent entity. Defaults to the nearest
                registered base class.
        registry: Target registry. Defaults to ``SCHEMA``.

    Returns:
        A builder for chaining column declarations.
    """
    builder = EntityBuilder(model, registry if registry is not None else SCHEMA)
    builder.registry.assign_storage(model, name, parent)
    return builder


def entity(
    name: str | None = None,
    *,
    parent: type | None = None,
    registry: Registry | None = None,
) -> Callable[[type], type]:
    """Class decorator registering the storage of an entity."""

    def decorate(model: type) -> type:
        define(model, name, parent=parent, registry=registry)
        return model

    return decorate


class EntityBuilder:
    """Fluent builder for column declarations of one entity."""

    def __init__(self, model: type, registry: Registry) -> None:
        self.model = model
        self.registry = registry

    def _add(
        self, prop: str, validator: Any, format: Format, **properties: Any  # noqa: A002
    ) -> EntityBuilder:
        self.registry.add_validation(self.model, prop, validator, format, **properties)
        return self

    # --- Storage ---

    def entity(self, name: str, parent: type | None = None) -> EntityBuilder:
        """Set the storage name (and optionally the parent entity)."""
        self.registry.assign_storage(self.model, name, parent)
        return self

    def primary(self, prop: str) -> EntityBuilder:
        self.registry.assign_real_column(self.model, prop)
        self.registry.assign_primary(self.model, prop)
        return self

    # --- Modifiers ---

    def alias(self, prop: str, name: str) -> EntityBuilder:
        self.registry.assign_column(self.model, prop, alias=name)
        return self

    def convert(self, prop: str, caster: Caster) -> EntityBuilder:
        """Set the caster applied to values of ``prop`` in every direction."""
        self.registry.assign_column(self.model, prop, caster=caster)
        return self

    def required(self, prop: str) -> EntityBuilder:
        self.registry.assign_column(self.model, prop, required=True)
        return self

    def hidden(self, prop: str) -> EntityBuilder:
        self.registry.assign_column(self.model, prop, hidden=True)
        return self

    def read_only(self, prop: str) -> EntityBuilder:
        column = self.registry.try_column(self.model, prop)
        if column is not None and column.write_only:
            raise ConflictingAccessModifierError(
                prop, self.registry.get_label(self.model), "read-only", "write-only"
            )
        self.registry.assign_column(self.model, prop, read_only=True)
        return self

    def write_only(self, prop: str) -> EntityBuilder:
        column = self.registry.try_column(self.model, prop)
        if column is not None and column.read_only:
            raise ConflictingAccessModifierError(
                prop, self.registry.get_label(self.model), "write-only", "read-only"
            )
        self.registry.assign_column(self.model, prop, write_only=True)
        return self

    # --- Scalar formats ---

    def id(self, prop: str) -> EntityBuilder:
        return self._add(prop, AnyValue(), Format.ID)

    def null(self, prop: str) -> EntityBuilder:
        return self._add(prop, Null(), Format.NULL)

    def binary(self, prop: str) -> EntityBuilder:
        return self._add(prop, Binary(), Format.BINARY)

    def boolean(self, prop: str) -> EntityBuilder:
        return self._add(prop, Boolean(), Format.BOOLEAN)

    def integer(
        self, prop: str, minimum: int | None = None, maximum: int | None = None
    ) -> EntityBuilder:
        validator = Integer(minimum, maximum)
        return self._add(prop, validator, Format.INTEGER, minimum=minimum, maximum=maximum)

    def decimal(
        self, prop: str, minimum: float | None = None, maximum: float | None = None
    ) -> EntityBuilder:
        validator = Decimal(minimum, maximum)
        return self._add(prop, validator, Format.DECIMAL, minimum=minimum, maximum=maximum)

    def number(
        self, prop: str, minimum: float | None = None, maximum: float | None = None
    ) -> EntityBuilder:
        validator = Number(minimum, maximum)
        return self._add(prop, validator, Format.NUMBER, minimum=minimum, maximum=maximum)

    def string(
        self, prop: str, minimum: int | None = None, maximum: int | None = None
    ) -> EntityBuilder:
        validator = String(minimum, maximum)
        return self._add(prop, validator, Format.STRING, minimum=minimum, maximum=maximum)

    def enumeration(self, prop: str, *values: str) -> EntityBuilder:
        if not values:
            raise ValueError(f"Enumeration column '{prop}' needs at least one value")
        return self._add(prop, Enumeration(*values), Format.ENUMERATION, values=values)

    def pattern(
        self, prop: str, pattern: str | re.Pattern[str], name: str | None = None
    ) -> EntityBuilder:
        validator = Pattern(pattern, name)
        return self._add(prop, validator, Format.PATTERN, pattern=validator.pattern.pattern)

    def timestamp(self, prop: str, minimum: Any = None, maximum: Any = None) -> EntityBuilder:
        validator = Timestamp(minimum, maximum)
        return self._add(prop, validator, Format.TIMESTAMP, minimum=minimum, maximum=maximum)

    def date(self, prop: str, minimum: Any = None, maximum: Any = None) -> EntityBuilder:
        validator = Date(minimum, maximum)
        return self._add(prop, validator, Format.DATE, minimum=minimum, maximum=maximum)

    # --- Structural formats ---

    def array(
        self,
        prop: str,
        model: ModelInput,
        unique: bool = False,
        minimum: int | None = None,
        maximum: int | None = None,
    ) -> EntityBuilder:
        """Declare a list column whose items are ``model`` instances."""
        validator = ArrayOf(model, unique, minimum, maximum)
        return self._add(
            prop,
            validator,
            Format.ARRAY,
            model=model,
            unique=unique,
            minimum=minimum,
            maximum=maximum,
        )

    def map(self, prop: str, model: ModelInput) -> EntityBuilder:
        """Declare a string-keyed mapping column whose values are ``model`` instances."""
        return self._add(prop, MapOf(model), Format.MAP, model=model)

    def object(self, prop: str, model: ModelInput) -> EntityBuilder:
        """Declare a single nested ``model`` instance."""
        return self._add(prop, InstanceOf(model), Format.OBJECT, model=model)

    # --- Joins ---

    def _local_column(self, local: str | None) -> tuple[str, bool]:
        if local is None:
            local = self.registry.get_primary_column(self.model).name
        column = self.registry.try_column(self.model, local)
        if column is None:
            raise ColumnNotFoundError(local, self.registry.get_label(self.model))
        return local, Format.ARRAY in column.formats

    def join(
        self,
        prop: str,
        foreign: str,
        model: ModelInput,
        local: str | None = None,
        match: Any = None,
    ) -> EntityBuilder:
        """Declare a virtual column joined from ``model`` where ``foreign`` equals ``local``.

        ``local`` defaults to the primary column. When the local column is
        an array, the joined value is a list of entities.
        """
        local, multiple = self._local_column(local)
        if multiple:
            formats = (Format.ARRAY, Format.NULL)
            validators: tuple[Any, ...] = (ArrayOf(model), Null())
        else:
            formats = (Format.OBJECT, Format.NULL)
            validators = (InstanceOf(model), Null())
        self.registry.assign_virtual_column(
            self.model,
            prop,
            local=local,
            foreign=foreign,
            model=model,
            multiple=multiple,
            query=match,
            formats=formats,
            validators=validators,
        )
        return self

    def join_all(
        self,
        prop: str,
        foreign: str,
        model: ModelInput,
        local: str | None = None,
        query: Any = None,
    ) -> EntityBuilder:
        """Declare a virtual column loading every ``model`` entity that matches."""
        local, multiple = self._local_column(local)
        self.registry.assign_virtual_column(
            self.model,
            prop,
            local=local,
            foreign=foreign,
            model=model,
            multiple=multiple,
            all=True,
            query=query,
            formats=(Format.ARRAY, Format.NULL),
            validators=(ArrayOf(model, nested=True), Null()),
        )
        return self
