"""
Example 03: Mapper over a Driver

This example demonstrates CRUD through a Mapper backed by a small
dict-based driver, including a joined entity.
"""

import asyncio

from row_mapper import SCHEMA, Mapper, MapperConfig, Normalizer, Query, define


class User:
    pass


class Order:
    pass


define(User, "users").id("id").primary("id").string("name").required("name")
(
    define(Order, "orders")
    .id("id")
    .primary("id")
    .id("user_id")
    .number("total")
    .join("user", "id", User, "user_id")
)


class DictDriver:
    """Keeps normalized rows per storage name."""

    def __init__(self):
        self.normalizer = Normalizer()
        self.tables = {}

    def _rows(self, model):
        return self.tables.setdefault(SCHEMA.get_storage_name(model), {})

    def _key(self, model):
        return SCHEMA.get_primary_column(model).name

    def _join(self, row, joints):
        row = dict(row)
        for joint in joints:
            for other in self.tables.get(joint.storage, {}).values():
                if other.get(joint.foreign) == row.get(joint.local):
                    row[joint.virtual] = other
        return row

    @staticmethod
    def _matches(row, match):
        if match is None:
            return True
        if isinstance(match, list):
            return any(DictDriver._matches(row, item) for item in match)
        return all(row.get(key) == value for key, value in match.items())

    async def insert(self, model, entities):
        ids = []
        for entity in entities:
            row = self.normalizer.create(model, entity, unsafe=True)
            self._rows(model)[row[self._key(model)]] = row
            ids.append(row[self._key(model)])
        return ids

    async def find(self, model, query, fields, joints):
        rows = self._rows(model).values()
        return [self._join(row, joints) for row in rows if self._matches(row, query.pre)]

    async def find_by_id(self, model, id, fields, joints):
        row = self._rows(model).get(id)
        return None if row is None else self._join(row, joints)

    async def update(self, model, match, entity):
        changes = self.normalizer.create(model, entity, unsafe=True)
        rows = [row for row in self._rows(model).values() if self._matches(row, match)]
        for row in rows:
            row.update(changes)
        return len(rows)

    async def update_by_id(self, model, id, entity):
        row = self._rows(model).get(id)
        if row is not None:
            row.update(self.normalizer.create(model, entity, unsafe=True))
        return row is not None

    async def replace_by_id(self, model, id, entity):
        if id not in self._rows(model):
            return False
        self._rows(model)[id] = {**self.normalizer.create(model, entity, unsafe=True), "id": id}
        return True

    async def delete(self, model, match):
        doomed = [key for key, row in self._rows(model).items() if self._matches(row, match)]
        for key in doomed:
            del self._rows(model)[key]
        return len(doomed)

    async def delete_by_id(self, model, id):
        return self._rows(model).pop(id, None) is not None

    async def count(self, model, query):
        return sum(1 for row in self._rows(model).values() if self._matches(row, query.pre))


async def main():
    driver = DictDriver()
    users = Mapper(driver, User)
    orders = Mapper(driver, Order, config=MapperConfig(unroll=True))

    print("=== Mapper over a Driver ===\n")

    print("1. Insert:")
    ids = await users.insert_many([{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}])
    await orders.insert({"id": 10, "user_id": 1, "total": 42.5})
    print(f"   User ids: {ids}\n")

    print("2. Find with join:")
    for order in await orders.find():
        print(f"   {orders.normalize(order)}")
    print()

    print("3. Update and count:")
    await users.update_by_id(2, {"name": "Robert"})
    print(f"   Users named Robert: {await users.count(Query(pre={'name': 'Robert'}))}\n")

    print("4. Delete:")
    await users.delete_by_id(2)
    print(f"   Remaining: {users.normalize_as_map(await users.find())}")


if __name__ == "__main__":
    asyncio.run(main())
