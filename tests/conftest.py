"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from types import SimpleNamespace
from typing import Any

import pytest

from row_mapper.core.columns import Joint
from row_mapper.core.registry import Registry
from row_mapper.mapping.builder import define
from row_mapper.mapping.normalizer import Normalizer
from row_mapper.repository.filters import Match, Query


@pytest.fixture
def registry() -> Registry:
    """Isolated registry, so test models never leak into ``SCHEMA``."""
    return Registry()


@pytest.fixture
def models(registry: Registry) -> SimpleNamespace:
    """Sample entities registered into the isolated registry.

    User:    id (primary), name (required), email (hidden)
    Profile: id (primary), tags (array of str), address (object),
             billing (required object), phones (map)
    Account: id (primary), login (aliased), password (write-only),
             created_at (read-only)
    Order:   id (primary), user_id, total, user (join on user_id)
    """

    class Address:
        pass

    class Phone:
        pass

    class User:
        pass

    class Profile:
        pass

    class Account:
        pass

    class Order:
        pass

    (
        define(Address, "addresses", registry=registry)
        .string("street")
        .required("street")
        .string("city")
    )
    define(Phone, "phones", registry=registry).string("number").required("number")
    (
        define(User, "users", registry=registry)
        .id("id")
        .primary("id")
        .string("name")
        .required("name")
        .string("email")
        .hidden("email")
    )
    (
        define(Profile, "profiles", registry=registry)
        .id("id")
        .primary("id")
        .array("tags", str)
        .object("address", Address)
        .object("billing", Address)
        .required("billing")
        .map("phones", Phone)
    )
    (
        define(Account, "accounts", registry=registry)
        .id("id")
        .primary("id")
        .string("login")
        .alias("login", "user_login")
        .string("password")
        .write_only("password")
        .string("created_at")
        .read_only("created_at")
    )
    (
        define(Order, "orders", registry=registry)
        .id("id")
        .primary("id")
        .id("user_id")
        .number("total")
        .join("user", "id", User, "user_id")
    )
    return SimpleNamespace(
        Address=Address,
        Phone=Phone,
        User=User,
        Profile=Profile,
        Account=Account,
        Order=Order,
    )


class MemoryDriver:
    """In-memory driver keeping normalized rows per model."""

    def __init__(self, registry: Registry) -> None:
        self.registry = registry
        self.normalizer = Normalizer(registry)
        self.tables: dict[type, dict[Any, dict[str, Any]]] = {}

    def _table(self, model: type) -> dict[Any, dict[str, Any]]:
        return self.tables.setdefault(model, {})

    def _matches(self, row: dict[str, Any], match: Match | list[Match] | None) -> bool:
        if match is None:
            return True
        if isinstance(match, list):
            return any(self._matches(row, item) for item in match)
        return all(row.get(key) == value for key, value in match.items())

    def _key(self, model: type) -> str:
        return self.registry.get_primary_column(model).name

    async def insert(self, model: type, entities: Sequence[Any]) -> list[Any]:
        ids = []
        for entity in entities:
            row = self.normalizer.create(model, entity, unsafe=True)
            self._table(model)[row[self._key(model)]] = row
            ids.append(row[self._key(model)])
        return ids

    async def find(
        self, model: type, query: Query, fields: Sequence[str], joints: Sequence[Joint]
    ) -> list[Any]:
        rows = [row for row in self._table(model).values() if self._matches(row, query.pre)]
        return [self._join(model, row, joints) for row in rows]

    async def find_by_id(
        self, model: type, id: Any, fields: Sequence[str], joints: Sequence[Joint]  # noqa: A002
    ) -> Any | None:
        row = self._table(model).get(id)
        return None if row is None else self._join(model, row, joints)

    def _join(self, model: type, row: dict[str, Any], joints: Sequence[Joint]) -> dict[str, Any]:
        joined = dict(row)
        for joint in joints:
            foreign = next(
                (m for m in self.tables if self.registry.get_storage_name(m) == joint.storage),
                None,
            )
            if foreign is None:
                continue
            matches = [
                item
                for item in self.tables[foreign].values()
                if item.get(joint.foreign) == row.get(joint.local)
            ]
            if matches:
                joined[joint.virtual] = matches[0]
        return joined

    async def update(self, model: type, match: Match | list[Match], entity: Any) -> int:
        changes = self.normalizer.create(model, entity, unsafe=True)
        count = 0
        for row in self._table(model).values():
            if self._matches(row, match):
                row.update(changes)
                count += 1
        return count

    async def update_by_id(self, model: type, id: Any, entity: Any) -> bool:  # noqa: A002
        row = self._table(model).get(id)
        if row is None:
            return False
        row.update(self.normalizer.create(model, entity, unsafe=True))
        return True

    async def replace_by_id(self, model: type, id: Any, entity: Any) -> bool:  # noqa: A002
        if id not in self._table(model):
            return False
        row = self.normalizer.create(model, entity, unsafe=True)
        row[self._key(model)] = id
        self._table(model)[id] = row
        return True

    async def delete(self, model: type, match: Match | list[Match]) -> int:
        table = self._table(model)
        doomed = [key for key, row in table.items() if self._matches(row, match)]
        for key in doomed:
            del table[key]
        return len(doomed)

    async def delete_by_id(self, model: type, id: Any) -> bool:  # noqa: A002
        return self._table(model).pop(id, None) is not None

    async def count(self, model: type, query: Query) -> int:
        return sum(1 for row in self._table(model).values() if self._matches(row, query.pre))


@pytest.fixture
def memory_driver(registry: Registry) -> MemoryDriver:
    return MemoryDriver(registry)
