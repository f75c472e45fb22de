"""Storage driver protocol.

Drivers implement persistence for one backend. They receive plain entity
data produced by the materializers and return raw rows that the mapper
materializes again. All methods are async.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from row_mapper.core.columns import Joint
from row_mapper.repository.filters import Match, Query


@runtime_checkable
class Driver(Protocol):
    """Async storage driver."""

    async def insert(self, model: type, entities: Sequence[Any]) -> list[Any]:
        """Insert entities, returning their ids in order."""
        ...

    async def find(
        self, model: type, query: Query, fields: Sequence[str], joints: Sequence[Joint]
    ) -> list[Any]:
        """Find every row matching ``query``."""
        ...

    async def find_by_id(
        self, model: type, id: Any, fields: Sequence[str], joints: Sequence[Joint]  # noqa: A002
    ) -> Any | None:
        """Find one row by primary value, None when absent."""
        ...

    async def update(self, model: type, match: Match | list[Match], entity: Any) -> int:
        """Update matching rows, returning how many changed."""
        ...

    async def update_by_id(self, model: type, id: Any, entity: Any) -> bool:  # noqa: A002
        ...

    async def replace_by_id(self, model: type, id: Any, entity: Any) -> bool:  # noqa: A002
        ...

    async def delete(self, model: type, match: Match | list[Match]) -> int:
        """Delete matching rows, returning how many were removed."""
        ...

    async def delete_by_id(self, model: type, id: Any) -> bool:  # noqa: A002
        ...

    async def count(self, model: type, query: Query) -> int:
        ...
