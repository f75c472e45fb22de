"""Filter data classes handed to storage drivers.

Pure data: the mapper never interprets them, drivers translate them into
their own query language.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Operator(Enum):
    """Comparison operators."""

    LT = "lt"
    LTE = "lte"
    EQ = "eq"
    NE = "ne"
    GTE = "gte"
    GT = "gt"
    IN = "in"
    NIN = "nin"
    BT = "bt"
    RE = "re"


class Order(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Operation:
    """One comparison against a column value."""

    operator: Operator
    value: Any


@dataclass(frozen=True)
class Limit:
    start: int
    count: int


# column name -> Operation or literal value (equality)
Match = dict[str, Any]
# column name -> sort order
Sort = dict[str, Order]


@dataclass(frozen=True)
class Query:
    """Filter for finds and counts.

    ``pre`` applies before joins are resolved, ``post`` after. A list of
    matches means any of them (OR), the columns of one match all (AND).
    """

    pre: Match | list[Match] | None = None
    post: Match | list[Match] | None = None
    sort: Sort | None = None
    limit: Limit | None = None


def is_operation(value: Any) -> bool:
    """Check whether ``value`` is an Operation or a mapping shaped like one."""
    if isinstance(value, Operation):
        return True
    return isinstance(value, Mapping) and "operator" in value and "value" in value
