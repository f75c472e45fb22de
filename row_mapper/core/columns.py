"""Column schema data classes.

Frozen dataclasses describing one property of an entity. Columns are
replaced, never mutated, when a registration call adds to them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from row_mapper.core.enums import Cast, ColumnType, Format, Shape
from row_mapper.core.validators import Group, ModelInput, Undefined, Validator

Caster = Callable[[Any, Cast], Any]


def identity(value: Any, cast: Cast) -> Any:
    """Default caster, returns the value unchanged."""
    return value


@dataclass(frozen=True)
class Column:
    """Base column schema shared by real and virtual columns."""

    type: ClassVar[ColumnType]

    name: str
    alias: str | None = None
    formats: tuple[Format, ...] = ()
    validators: tuple[Validator, ...] = ()
    required: bool = False
    hidden: bool = False
    read_only: bool = False
    write_only: bool = False
    model: ModelInput | None = None
    caster: Caster = identity

    @property
    def shape(self) -> Shape:
        """Structural shape, by priority Array > Map > Object."""
        if Format.ARRAY in self.formats:
            return Shape.ARRAY
        if Format.MAP in self.formats:
            return Shape.MAP
        if Format.OBJECT in self.formats:
            return Shape.OBJECT
        return Shape.SCALAR

    @property
    def validation(self) -> Group:
        """OR group over every declared format, accepting absence unless required."""
        if self.required:
            return Group(Group.OR, self.validators)
        return Group(Group.OR, (*self.validators, Undefined()))

    def validate(self, value: Any) -> bool:
        if not self.validators:
            return True
        return self.validation.validate(value)


@dataclass(frozen=True)
class RealColumn(Column):
    """A column stored with the entity."""

    type: ClassVar[ColumnType] = ColumnType.REAL

    unique: bool = False
    minimum: Any = None
    maximum: Any = None
    pattern: str | None = None
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class VirtualColumn(Column):
    """A column loaded by joining another entity's storage."""

    type: ClassVar[ColumnType] = ColumnType.VIRTUAL

    local: str = ""
    foreign: str = ""
    multiple: bool = False
    all: bool = False
    query: Any = None


@dataclass(frozen=True)
class Joint:
    """Join descriptor handed to storage drivers."""

    local: str
    foreign: str
    virtual: str
    storage: str
    multiple: bool


@dataclass
class Storage:
    """Registration record of one entity class."""

    model: type
    name: str | None = None
    primary: str | None = None
    real: dict[str, RealColumn] = field(default_factory=dict)
    virtual: dict[str, VirtualColumn] = field(default_factory=dict)
    parent: type | None = None


def is_real(column: Column) -> bool:
    return column.type is ColumnType.REAL


def is_virtual(column: Column) -> bool:
    return column.type is ColumnType.VIRTUAL


def get_name(column: Column) -> str:
    """External name of a column: its alias, falling back to its name."""
    return column.alias or column.name


def is_visible(column: Column, *fields: str) -> bool:
    """Check whether a column is selected by a dot-path field list.

    An empty field list selects everything. Otherwise the column is
    visible when a field equals its name or starts with ``"<name>."``.
    """
    if not fields:
        return True
    prefix = f"{column.name}."
    return any(item == column.name or item.startswith(prefix) for item in fields)


def get_nested_fields(column: Column, fields: Iterable[str]) -> list[str]:
    """Narrow a field list to the sub-paths below ``column``."""
    prefix = f"{column.name}."
    nested = []
    for item in fields:
        if item.startswith(prefix):
            suffix = item[len(prefix) :]
            if suffix and suffix != "*":
                nested.append(suffix)
    return nested
