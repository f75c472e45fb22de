"""Mapper - CRUD orchestration over a storage driver.

Input entities pass through the Inputer before reaching the driver, rows
coming back pass through the Outputer. The mapper holds no state besides
its model, driver and defaults.

The ``*_ex`` write variants go through another registered model than the
mapper's own, and always require every required column.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from row_mapper.core.columns import get_name
from row_mapper.core.config import MapperConfig
from row_mapper.core.exceptions import EntityNotFoundError, InvalidModelError
from row_mapper.core.registry import SCHEMA, Registry
from row_mapper.mapping.inputer import Inputer
from row_mapper.mapping.normalizer import Normalizer
from row_mapper.mapping.outputer import Outputer
from row_mapper.repository.driver import Driver
from row_mapper.repository.filters import Match, Query

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Mapper(Generic[T]):
    """Entity mapper for one model.

    Args:
        driver: Storage driver.
        model: Registered entity class.
        registry: Schema registry. Defaults to ``SCHEMA``.
        config: Normalization and projection defaults.

    Raises:
        InvalidModelError: If ``model`` is not a registered entity.
    """

    def __init__(
        self,
        driver: Driver,
        model: type[T],
        registry: Registry | None = None,
        config: MapperConfig | None = None,
    ) -> None:
        self.registry = registry if registry is not None else SCHEMA
        if not self.registry.is_entity(model):
            raise InvalidModelError(model)
        self.driver = driver
        self.model = model
        self.config = config or MapperConfig()
        self._inputer = Inputer(self.registry)
        self._outputer = Outputer(self.registry)
        self._normalizer = Normalizer(self.registry)

    def _fields(self, fields: Sequence[str] | None) -> list[str]:
        return list(fields) if fields is not None else list(self.config.fields)

    # --- Writes ---

    def _entity_model(self, model: Any) -> type:
        if not self.registry.is_entity(model):
            raise InvalidModelError(model)
        return self.registry.get_entity_model(model)

    async def insert_many_ex(self, model: Any, entities: Sequence[Any]) -> list[Any]:
        """Insert entities through another registered model, returning their ids.

        Raises:
            InvalidModelError: If ``model`` is not a registered entity.
            MissingRequiredColumnError: If an entity lacks a required column.
        """
        model = self._entity_model(model)
        data = self._inputer.create_full_array(model, list(entities))
        logger.debug("Inserting %d '%s' entities", len(data), model.__name__)
        return await self.driver.insert(model, data)

    async def insert_many(self, entities: Sequence[Any]) -> list[Any]:
        """Insert entities with every required column, returning their ids."""
        return await self.insert_many_ex(self.model, entities)

    async def insert_ex(self, model: Any, entity: Any) -> Any:
        return (await self.insert_many_ex(model, [entity]))[0]

    async def insert(self, entity: Any) -> Any:
        return await self.insert_ex(self.model, entity)

    async def update_ex(self, model: Any, match: Match | list[Match], entity: Any) -> int:
        """Update matching entities through another model. Every required column is needed."""
        model = self._entity_model(model)
        data = self._inputer.create_full(model, entity)
        logger.debug("Updating '%s' entities matching %r", model.__name__, match)
        return await self.driver.update(model, match, data)

    async def update(self, match: Match | list[Match], entity: Any) -> int:
        """Update matching entities with the columns present in ``entity``."""
        data = self._inputer.create(self.model, entity)
        logger.debug("Updating '%s' entities matching %r", self.model.__name__, match)
        return await self.driver.update(self.model, match, data)

    async def update_by_id_ex(self, model: Any, id: Any, entity: Any) -> bool:  # noqa: A002
        model = self._entity_model(model)
        data = self._inputer.create_full(model, entity)
        logger.debug("Updating '%s' entity %r", model.__name__, id)
        return await self.driver.update_by_id(model, id, data)

    async def update_by_id(self, id: Any, entity: Any) -> bool:  # noqa: A002
        data = self._inputer.create(self.model, entity)
        logger.debug("Updating '%s' entity %r", self.model.__name__, id)
        return await self.driver.update_by_id(self.model, id, data)

    async def replace_by_id_ex(self, model: Any, id: Any, entity: Any) -> bool:  # noqa: A002
        model = self._entity_model(model)
        data = self._inputer.create_full(model, entity)
        logger.debug("Replacing '%s' entity %r", model.__name__, id)
        return await self.driver.replace_by_id(model, id, data)

    async def replace_by_id(self, id: Any, entity: Any) -> bool:  # noqa: A002
        """Replace an entity as a whole, so every required column must be given."""
        return await self.replace_by_id_ex(self.model, id, entity)

    async def delete(self, match: Match | list[Match]) -> int:
        logger.debug("Deleting '%s' entities matching %r", self.model.__name__, match)
        return await self.driver.delete(self.model, match)

    async def delete_by_id(self, id: Any) -> bool:  # noqa: A002
        logger.debug("Deleting '%s' entity %r", self.model.__name__, id)
        return await self.driver.delete_by_id(self.model, id)

    # --- Reads ---

    async def find(
        self, query: Query | None = None, fields: Sequence[str] | None = None
    ) -> list[T]:
        """Find entities matching ``query``, projected to ``fields``."""
        selected = self._fields(fields)
        joints = self.registry.get_joints(self.model)
        logger.debug("Finding '%s' entities with %r", self.model.__name__, query)
        rows = await self.driver.find(self.model, query or Query(), selected, joints)
        return self._outputer.create_full_array(self.model, rows, selected)

    async def find_by_id(
        self, id: Any, fields: Sequence[str] | None = None  # noqa: A002
    ) -> T | None:
        selected = self._fields(fields)
        joints = self.registry.get_joints(self.model)
        logger.debug("Finding '%s' entity %r", self.model.__name__, id)
        row = await self.driver.find_by_id(self.model, id, selected, joints)
        if row is None:
            return None
        return self._outputer.create_full(self.model, row, selected)

    async def get_by_id(self, id: Any, fields: Sequence[str] | None = None) -> T:  # noqa: A002
        """Like ``find_by_id`` but raises when nothing matches.

        Raises:
            EntityNotFoundError: If no entity has the given primary value.
        """
        entity = await self.find_by_id(id, fields)
        if entity is None:
            raise EntityNotFoundError(id, self.registry.get_label(self.model))
        return entity

    async def count(self, query: Query | None = None) -> int:
        return await self.driver.count(self.model, query or Query())

    # --- Normalization ---

    def normalize(
        self,
        entity: Any,
        alias: bool | None = None,
        unsafe: bool | None = None,
        unroll: bool | None = None,
    ) -> dict[str, Any]:
        """Normalize one entity. Unset flags fall back to the mapper config."""
        return self._normalizer.create(
            self.model,
            entity,
            self.config.alias if alias is None else alias,
            self.config.unsafe if unsafe is None else unsafe,
            self.config.unroll if unroll is None else unroll,
        )

    def normalize_all(
        self,
        entities: Sequence[Any],
        alias: bool | None = None,
        unsafe: bool | None = None,
        unroll: bool | None = None,
    ) -> list[dict[str, Any]]:
        return [self.normalize(entity, alias, unsafe, unroll) for entity in entities]

    def normalize_as_map(
        self,
        entities: Sequence[Any],
        alias: bool | None = None,
        unsafe: bool | None = None,
        unroll: bool | None = None,
    ) -> dict[Any, dict[str, Any]]:
        """Normalize entities into a dict keyed by their primary value."""
        primary = self.registry.get_primary_column(self.model)
        use_alias = self.config.alias if alias is None else alias
        key = get_name(primary) if use_alias else primary.name
        data = {}
        for entity in entities:
            normalized = self.normalize(entity, alias, unsafe, unroll)
            data[normalized[key]] = normalized
        return data
