"""Column format, cast direction, column type and value shape enumerations."""

from __future__ import annotations

from enum import Enum


class Format(Enum):
    """Accepted value formats for a column. A column may declare several."""

    ID = "id"
    NULL = "null"
    BINARY = "binary"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    DECIMAL = "decimal"
    NUMBER = "number"
    STRING = "string"
    ENUMERATION = "enumeration"
    PATTERN = "pattern"
    TIMESTAMP = "timestamp"
    DATE = "date"
    ARRAY = "array"
    MAP = "map"
    OBJECT = "object"


class Cast(Enum):
    """Direction passed to a column caster."""

    INPUT = "input"
    OUTPUT = "output"
    NORMALIZE = "normalize"


class ColumnType(Enum):
    """Real columns are stored, virtual columns are joined from another entity."""

    REAL = "real"
    VIRTUAL = "virtual"


class Shape(Enum):
    """Structural shape used to dispatch value conversion."""

    SCALAR = "scalar"
    ARRAY = "array"
    MAP = "map"
    OBJECT = "object"


class Missing(Enum):
    """Marks an absent value, as opposed to an explicit None."""

    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = Missing.MISSING
