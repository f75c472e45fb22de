"""Repository layer - CRUD mapper over storage drivers."""

from __future__ import annotations

from row_mapper.repository.driver import Driver
from row_mapper.repository.filters import (
    Limit,
    Match,
    Operation,
    Operator,
    Order,
    Query,
    Sort,
    is_operation,
)
from row_mapper.repository.mapper import Mapper

__all__ = [
    "Mapper",
    "Driver",
    "Query",
    "Match",
    "Sort",
    "Operation",
    "Operator",
    "Order",
    "Limit",
    "is_operation",
]
