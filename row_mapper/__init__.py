"""RowMapper - schema registry and entity materialization for row storage."""

from __future__ import annotations

import logging

from row_mapper.core.columns import Column, Joint, RealColumn, Storage, VirtualColumn
from row_mapper.core.config import MapperConfig
from row_mapper.core.enums import MISSING, Cast, ColumnType, Format, Shape
from row_mapper.core.exceptions import (
    ColumnConflictError,
    ColumnNotFoundError,
    ConflictingAccessModifierError,
    EntityError,
    EntityNotFoundError,
    InvalidModelError,
    InvalidValueError,
    MissingRequiredColumnError,
    MissingRequiredColumnsError,
    NoPrimaryColumnError,
    ReadOnlyViolation,
    RegistryFrozenError,
    RowMapperError,
    SchemaError,
    TypeMismatchError,
    WriteOnlyViolation,
)
from row_mapper.core.registry import SCHEMA, Registry
from row_mapper.mapping.builder import EntityBuilder, define, entity
from row_mapper.mapping.inputer import Inputer
from row_mapper.mapping.normalizer import Normalizer
from row_mapper.mapping.outputer import Outputer
from row_mapper.repository.driver import Driver
from row_mapper.repository.filters import Limit, Operation, Operator, Order, Query
from row_mapper.repository.mapper import Mapper

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Registry
    "Registry",
    "SCHEMA",
    # Registration
    "define",
    "entity",
    "EntityBuilder",
    # Columns
    "Column",
    "RealColumn",
    "VirtualColumn",
    "Storage",
    "Joint",
    # Materializers
    "Inputer",
    "Outputer",
    "Normalizer",
    # Repository
    "Mapper",
    "MapperConfig",
    "Driver",
    "Query",
    "Operation",
    "Operator",
    "Order",
    "Limit",
    # Enums
    "Format",
    "Cast",
    "ColumnType",
    "Shape",
    "MISSING",
    # Exceptions
    "RowMapperError",
    "SchemaError",
    "InvalidModelError",
    "ColumnNotFoundError",
    "NoPrimaryColumnError",
    "ConflictingAccessModifierError",
    "ColumnConflictError",
    "RegistryFrozenError",
    "EntityError",
    "EntityNotFoundError",
    "MissingRequiredColumnError",
    "MissingRequiredColumnsError",
    "ReadOnlyViolation",
    "WriteOnlyViolation",
    "TypeMismatchError",
    "InvalidValueError",
]
