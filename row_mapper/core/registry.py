"""Schema Registry - maps entity classes to their storage and columns.

Lifecycle:
    1. register: entity builders call the ``assign_*`` methods, usually at
       module load. Writes are serialized with a lock.
    2. freeze: ``freeze()`` rejects any further registration. Lookups on
       a frozen registry are lock-free.

Merged rows are cached per model until the next registration call.

Inheritance:
    A model resolves to the first registered class of its MRO. From there
    the lookup follows each storage's ``parent`` link (or the nearest
    registered base class when no parent was given). Rows merge the chain
    root-first, so a subclass column shadows an ancestor column of the
    same name.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from row_mapper.core.columns import (
    Column,
    Joint,
    RealColumn,
    Storage,
    VirtualColumn,
    get_name,
    is_visible,
)
from row_mapper.core.enums import Format
from row_mapper.core.exceptions import (
    ColumnConflictError,
    ColumnNotFoundError,
    InvalidModelError,
    InvalidValueError,
    NoPrimaryColumnError,
    RegistryFrozenError,
)
from row_mapper.core.validators import ModelInput, Validator

logger = logging.getLogger(__name__)

_Rows = tuple[dict[str, RealColumn], dict[str, VirtualColumn]]


class _ColumnAttribute:
    """Validating data descriptor installed for every formatted column."""

    def __init__(self, registry: Registry, name: str) -> None:
        self._registry = registry
        self._name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        try:
            return instance.__dict__[self._name]
        except KeyError:
            raise AttributeError(
                f"'{type(instance).__name__}' object has no attribute '{self._name}'"
            ) from None

    def __set__(self, instance: Any, value: Any) -> None:
        model = type(instance)
        column = self._registry.try_column(model, self._name)
        if column is not None and not column.validate(value):
            raise InvalidValueError(self._name, self._registry.get_label(model), value)
        instance.__dict__[self._name] = value

    def __delete__(self, instance: Any) -> None:
        try:
            del instance.__dict__[self._name]
        except KeyError:
            raise AttributeError(self._name) from None


def _entity_eq(self: Any, other: Any) -> bool:
    if type(self) is not type(other):
        return NotImplemented
    return vars(self) == vars(other)


def _entity_repr(self: Any) -> str:
    values = ", ".join(f"{key}={value!r}" for key, value in vars(self).items())
    return f"{type(self).__name__}({values})"


class Registry:
    """Table of entity storages.

    Most code shares the module-level ``SCHEMA`` instance. Separate
    instances keep registrations isolated, e.g. in tests.
    """

    def __init__(self) -> None:
        self._storages: dict[type, Storage] = {}
        self._lock = threading.RLock()
        self._frozen = False
        self._rows_cache: dict[type, _Rows] = {}

    # --- Lifecycle ---

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Reject any further registration."""
        with self._lock:
            self._frozen = True
        logger.debug("Registry frozen with %d storages", len(self._storages))

    def _check_writable(self, action: str) -> None:
        if self._frozen:
            raise RegistryFrozenError(action)

    # --- Registration ---

    def assign_storage(
        self,
        model: type,
        name: str | None = None,
        parent: type | None = None,
    ) -> Storage:
        """Create or update the storage record of ``model``."""
        with self._lock:
            self._check_writable(f"assign storage of '{model.__name__}'")
            storage = self._storages.get(model)
            if storage is None:
                storage = Storage(model=model)
                self._storages[model] = storage
                self._install_methods(model)
                self._rows_cache.clear()
                logger.debug("Registered entity '%s'", model.__name__)
            if name is not None:
                storage.name = name
            if parent is not None and storage.parent is not parent:
                storage.parent = parent
                self._rows_cache.clear()
            return storage

    def assign_primary(self, model: type, name: str) -> None:
        with self._lock:
            storage = self.assign_storage(model)
            if storage.primary is not None and storage.primary != name:
                raise ColumnConflictError(
                    name,
                    self.get_label(model),
                    f"cannot be primary, '{storage.primary}' already is",
                )
            storage.primary = name

    def assign_real_column(self, model: type, name: str, /, **properties: Any) -> RealColumn:
        """Create or merge ``properties`` into a real column."""
        with self._lock:
            storage = self.assign_storage(model)
            if name in storage.virtual:
                raise ColumnConflictError(name, self.get_label(model), "is already virtual")
            current = storage.real.get(name)
            if current is None:
                column = RealColumn(name=name, **properties)
            else:
                column = dataclasses.replace(current, **properties)
            storage.real[name] = column
            self._rows_cache.clear()
            return column

    def assign_virtual_column(
        self, model: type, name: str, /, **properties: Any
    ) -> VirtualColumn:
        """Create or merge ``properties`` into a virtual column."""
        with self._lock:
            storage = self.assign_storage(model)
            if name in storage.real:
                raise ColumnConflictError(name, self.get_label(model), "is already real")
            current = storage.virtual.get(name)
            if current is None:
                column = VirtualColumn(name=name, **properties)
                self._install_attribute(model, name)
            else:
                column = dataclasses.replace(current, **properties)
            storage.virtual[name] = column
            self._rows_cache.clear()
            return column

    def assign_column(self, model: type, name: str, /, **properties: Any) -> Column:
        """Merge ``properties`` into the virtual column ``name`` or else a real one."""
        with self._lock:
            storage = self.assign_storage(model)
            if name in storage.virtual:
                return self.assign_virtual_column(model, name, **properties)
            return self.assign_real_column(model, name, **properties)

    def add_validation(
        self,
        model: type,
        name: str,
        validator: Validator,
        format: Format,  # noqa: A002
        /,
        **properties: Any,
    ) -> RealColumn:
        """Append a format to a real column and install its validating attribute."""
        with self._lock:
            self._check_writable(f"add {format.value} format to '{name}'")
            storage = self._storages.get(model)
            current = storage.real.get(name) if storage is not None else None
            formats = current.formats if current is not None else ()
            validators = current.validators if current is not None else ()
            column = self.assign_real_column(
                model,
                name,
                formats=(*formats, format),
                validators=(*validators, validator),
                **properties,
            )
            if not formats:
                self._install_attribute(model, name)
            return column

    def _install_attribute(self, model: type, name: str) -> None:
        if not isinstance(model.__dict__.get(name), _ColumnAttribute):
            setattr(model, name, _ColumnAttribute(self, name))

    @staticmethod
    def _install_methods(model: type) -> None:
        if "__eq__" not in model.__dict__:
            model.__eq__ = _entity_eq  # type: ignore[method-assign,assignment]
            model.__hash__ = None  # type: ignore[assignment]
        if "__repr__" not in model.__dict__:
            model.__repr__ = _entity_repr  # type: ignore[method-assign,assignment]

    # --- Model resolution ---

    def try_entity_model(self, model: ModelInput | Any) -> type | None:
        """Resolve a class or a zero-argument class thunk. Never raises."""
        if isinstance(model, type):
            return model
        if callable(model):
            try:
                inspect.signature(model).bind()
            except (TypeError, ValueError):
                return None
            return self.try_entity_model(model())
        return None

    def get_entity_model(self, model: ModelInput | Any) -> type:
        resolved = self.try_entity_model(model)
        if resolved is None:
            raise InvalidModelError(model, "cannot be resolved to a class")
        return resolved

    def is_entity(self, model: ModelInput | Any) -> bool:
        """Check whether ``model`` resolves to a class with registered storage."""
        resolved = self.try_entity_model(model)
        return resolved is not None and self._first_registered(resolved) is not None

    def _first_registered(self, model: ModelInput | Any) -> type | None:
        resolved = self.try_entity_model(model)
        if resolved is None:
            return None
        for cls in resolved.__mro__:
            if cls in self._storages:
                return cls
        return None

    def _chain(self, model: ModelInput | Any) -> list[Storage]:
        """Storages from ``model`` up to the root, child first."""
        chain: list[Storage] = []
        seen: set[type] = set()
        current = self._first_registered(model)
        while current is not None and current not in seen:
            seen.add(current)
            storage = self._storages[current]
            chain.append(storage)
            if storage.parent is not None:
                current = storage.parent
            else:
                current = self._first_registered_base(current)
        return chain

    def _first_registered_base(self, model: type) -> type | None:
        for cls in model.__mro__[1:]:
            if cls in self._storages:
                return cls
        return None

    def _rows(self, model: ModelInput | Any) -> _Rows:
        resolved = self.try_entity_model(model)
        if resolved is None:
            raise InvalidModelError(model)
        cached = self._rows_cache.get(resolved)
        if cached is not None:
            return cached
        with self._lock:
            chain = self._chain(resolved)
            if not chain:
                raise InvalidModelError(resolved)
            real: dict[str, RealColumn] = {}
            virtual: dict[str, VirtualColumn] = {}
            for storage in reversed(chain):
                for name, column in storage.real.items():
                    virtual.pop(name, None)
                    real[name] = column
                for name, virtual_column in storage.virtual.items():
                    real.pop(name, None)
                    virtual[name] = virtual_column
            self._rows_cache[resolved] = (real, virtual)
            return real, virtual

    # --- Queries ---

    def get_label(self, model: ModelInput | Any) -> str:
        """Storage name of ``model`` when it has one, else its class name."""
        for storage in self._chain(model):
            if storage.name is not None:
                return storage.name
        return getattr(self.try_entity_model(model), "__name__", repr(model))

    def get_storage_name(self, model: type) -> str:
        """Look up the storage name of a registered model.

        Raises:
            InvalidModelError: If the model is not registered or no class
                in its chain declared a storage name.
        """
        chain = self._chain(model)
        if not chain:
            raise InvalidModelError(model)
        for storage in chain:
            if storage.name is not None:
                return storage.name
        raise InvalidModelError(model, "has no storage name")

    def get_real_row(self, model: type, *fields: str) -> Mapping[str, RealColumn]:
        real, _ = self._rows(model)
        return MappingProxyType(
            {name: column for name, column in real.items() if is_visible(column, *fields)}
        )

    def get_virtual_row(self, model: type, *fields: str) -> Mapping[str, VirtualColumn]:
        _, virtual = self._rows(model)
        return MappingProxyType(
            {name: column for name, column in virtual.items() if is_visible(column, *fields)}
        )

    def get_rows(self, model: type, *fields: str) -> Mapping[str, Column]:
        """Real and virtual columns visible under ``fields``, real first."""
        real, virtual = self._rows(model)
        rows: dict[str, Column] = {}
        for row in (real, virtual):
            for name, column in row.items():
                if is_visible(column, *fields):
                    rows[name] = column
        return MappingProxyType(rows)

    def get_real_column(self, model: type, name: str) -> RealColumn:
        real, _ = self._rows(model)
        try:
            return real[name]
        except KeyError:
            raise ColumnNotFoundError(name, self.get_label(model)) from None

    def try_column(self, model: type, name: str) -> Column | None:
        """Real or virtual column ``name``, or None. Never raises."""
        if self._first_registered(model) is None:
            return None
        real, virtual = self._rows(model)
        return real.get(name) or virtual.get(name)

    def get_primary_column(self, model: type) -> RealColumn:
        for storage in self._chain(model):
            if storage.primary is not None:
                return self.get_real_column(model, storage.primary)
        raise NoPrimaryColumnError(self.get_label(model))

    def get_joints(self, model: type) -> list[Joint]:
        """Join descriptors for every virtual column of ``model``."""
        joints = []
        for column in self.get_virtual_row(model).values():
            foreign_model = self.get_entity_model(column.model)
            local = self.get_real_column(model, column.local)
            foreign = self.get_real_column(foreign_model, column.foreign)
            joints.append(
                Joint(
                    local=get_name(local),
                    foreign=get_name(foreign),
                    virtual=column.name,
                    storage=self.get_storage_name(foreign_model),
                    multiple=Format.ARRAY in local.formats,
                )
            )
        return joints

    def try_path_columns(self, model: type, path: str) -> list[Column] | None:
        """Columns along a dot path, or None when any step is unknown."""
        current: type | None = model
        columns: list[Column] = []
        for item in path.split("."):
            if current is None:
                return None
            column = self.try_column(current, item)
            if column is None:
                return None
            columns.append(column)
            current = self.try_entity_model(column.model) if column.model is not None else None
        return columns

    def get_path_columns(self, model: type, path: str) -> list[Column]:
        columns = self.try_path_columns(model, path)
        if columns is None:
            raise ColumnNotFoundError(path, self.get_label(model))
        return columns

    def __contains__(self, model: object) -> bool:
        return isinstance(model, type) and model in self._storages

    def __len__(self) -> int:
        """Number of registered entity classes."""
        return len(self._storages)


SCHEMA = Registry()
