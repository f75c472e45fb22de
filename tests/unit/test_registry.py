"""Unit tests for the schema Registry."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from row_mapper.core.columns import Joint
from row_mapper.core.exceptions import (
    ColumnConflictError,
    ColumnNotFoundError,
    InvalidModelError,
    InvalidValueError,
    NoPrimaryColumnError,
    RegistryFrozenError,
)
from row_mapper.core.registry import Registry
from row_mapper.mapping.builder import define


class TestEntityResolution:
    def test_is_entity(self, registry: Registry, models: SimpleNamespace) -> None:
        assert registry.is_entity(models.User)
        assert not registry.is_entity(str)
        assert not registry.is_entity("User")

    def test_is_entity_through_thunk(self, registry: Registry, models: SimpleNamespace) -> None:
        assert registry.is_entity(lambda: models.User)

    def test_try_entity_model(self, registry: Registry, models: SimpleNamespace) -> None:
        assert registry.try_entity_model(models.User) is models.User
        assert registry.try_entity_model(lambda: models.User) is models.User
        assert registry.try_entity_model(42) is None
        assert registry.try_entity_model(lambda x: x) is None

    def test_get_entity_model_raises(self, registry: Registry) -> None:
        with pytest.raises(InvalidModelError):
            registry.get_entity_model(None)

    def test_subclass_resolves_to_parent_storage(
        self, registry: Registry, models: SimpleNamespace
    ) -> None:
        class Admin(models.User):
            pass

        assert registry.is_entity(Admin)
        assert registry.get_storage_name(Admin) == "users"
        assert set(registry.get_rows(Admin)) == {"id", "name", "email"}


class TestStorage:
    def test_storage_name(self, registry: Registry, models: SimpleNamespace) -> None:
        assert registry.get_storage_name(models.User) == "users"

    def test_unregistered_model(self, registry: Registry) -> None:
        class Ghost:
            pass

        with pytest.raises(InvalidModelError, match="Ghost"):
            registry.get_storage_name(Ghost)
        with pytest.raises(InvalidModelError):
            registry.get_real_row(Ghost)

    def test_missing_storage_name(self, registry: Registry) -> None:
        class Nameless:
            pass

        define(Nameless, registry=registry).string("a")
        with pytest.raises(InvalidModelError, match="no storage name"):
            registry.get_storage_name(Nameless)

    def test_len_and_contains(self, registry: Registry, models: SimpleNamespace) -> None:
        assert len(registry) == 6
        assert models.User in registry
        assert str not in registry


class TestRows:
    def test_real_row(self, registry: Registry, models: SimpleNamespace) -> None:
        assert list(registry.get_real_row(models.User)) == ["id", "name", "email"]

    def test_virtual_row(self, registry: Registry, models: SimpleNamespace) -> None:
        assert list(registry.get_virtual_row(models.Order)) == ["user"]
        assert list(registry.get_virtual_row(models.User)) == []

    def test_rows_union(self, registry: Registry, models: SimpleNamespace) -> None:
        assert list(registry.get_rows(models.Order)) == ["id", "user_id", "total", "user"]

    def test_rows_are_read_only(self, registry: Registry, models: SimpleNamespace) -> None:
        row = registry.get_real_row(models.User)
        with pytest.raises(TypeError):
            row["x"] = None  # type: ignore[index]

    def test_projection(self, registry: Registry, models: SimpleNamespace) -> None:
        row = registry.get_real_row(models.Profile, "address.city")
        assert list(row) == ["address"]
        nested = registry.get_real_row(models.Address, "city")
        assert list(nested) == ["city"]

    def test_projection_excludes_siblings(
        self, registry: Registry, models: SimpleNamespace
    ) -> None:
        row = registry.get_rows(models.Profile, "tags", "address.street")
        assert set(row) == {"tags", "address"}


class TestPointLookups:
    def test_get_real_column(self, registry: Registry, models: SimpleNamespace) -> None:
        column = registry.get_real_column(models.User, "name")
        assert column.name == "name"
        assert column.required

    def test_get_real_column_not_found(self, registry: Registry, models: SimpleNamespace) -> None:
        with pytest.raises(ColumnNotFoundError, match="nope@users"):
            registry.get_real_column(models.User, "nope")

    def test_virtual_is_not_real(self, registry: Registry, models: SimpleNamespace) -> None:
        with pytest.raises(ColumnNotFoundError):
            registry.get_real_column(models.Order, "user")

    def test_try_column(self, registry: Registry, models: SimpleNamespace) -> None:
        assert registry.try_column(models.Order, "user") is not None
        assert registry.try_column(models.Order, "nope") is None
        assert registry.try_column(str, "nope") is None

    def test_primary_column(self, registry: Registry, models: SimpleNamespace) -> None:
        assert registry.get_primary_column(models.User).name == "id"

    def test_no_primary_column(self, registry: Registry, models: SimpleNamespace) -> None:
        with pytest.raises(NoPrimaryColumnError, match="addresses"):
            registry.get_primary_column(models.Address)

    def test_second_primary_conflicts(self, registry: Registry, models: SimpleNamespace) -> None:
        with pytest.raises(ColumnConflictError, match="already is"):
            define(models.User, registry=registry).primary("name")


class TestInheritance:
    def test_subclass_columns_merge(self, registry: Registry, models: SimpleNamespace) -> None:
        class Admin(models.User):
            pass

        define(Admin, "admins", registry=registry).integer("level")
        assert list(registry.get_real_row(Admin)) == ["id", "name", "email", "level"]
        assert registry.get_storage_name(Admin) == "admins"
        assert registry.get_primary_column(Admin).name == "id"

    def test_subclass_shadows_parent_column(
        self, registry: Registry, models: SimpleNamespace
    ) -> None:
        class Admin(models.User):
            pass

        define(Admin, registry=registry).integer("name")
        column = registry.get_real_column(Admin, "name")
        assert not column.required
        assert registry.get_real_column(models.User, "name").required

    def test_explicit_parent_link(self, registry: Registry, models: SimpleNamespace) -> None:
        class Standalone:
            pass

        define(Standalone, "standalone", parent=models.User, registry=registry).boolean("flag")
        assert list(registry.get_real_row(Standalone)) == ["id", "name", "email", "flag"]

    def test_parent_cycle_is_bounded(self, registry: Registry) -> None:
        class A:
            pass

        class B:
            pass

        define(A, "a", registry=registry).string("x")
        define(B, "b", parent=A, registry=registry).string("y")
        registry.assign_storage(A, parent=B)
        assert set(registry.get_real_row(B)) == {"x", "y"}


class TestLifecycle:
    def test_freeze_rejects_registration(self, registry: Registry, models: SimpleNamespace) -> None:
        registry.freeze()
        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            define(models.User, registry=registry).string("nickname")

    def test_frozen_lookups_still_work(self, registry: Registry, models: SimpleNamespace) -> None:
        registry.freeze()
        assert list(registry.get_real_row(models.User)) == ["id", "name", "email"]
        assert list(registry.get_real_row(models.User)) == ["id", "name", "email"]


class TestJoints:
    def test_get_joints(self, registry: Registry, models: SimpleNamespace) -> None:
        assert registry.get_joints(models.Order) == [
            Joint(local="user_id", foreign="id", virtual="user", storage="users", multiple=False)
        ]

    def test_multiple_joint(self, registry: Registry, models: SimpleNamespace) -> None:
        class Group:
            pass

        (
            define(Group, "groups", registry=registry)
            .id("id")
            .primary("id")
            .array("member_ids", int)
            .join("members", "id", models.User, "member_ids")
        )
        [joint] = registry.get_joints(Group)
        assert joint.multiple


class TestPathColumns:
    def test_path(self, registry: Registry, models: SimpleNamespace) -> None:
        columns = registry.get_path_columns(models.Order, "user.name")
        assert [column.name for column in columns] == ["user", "name"]

    def test_invalid_path(self, registry: Registry, models: SimpleNamespace) -> None:
        assert registry.try_path_columns(models.Order, "user.nope") is None
        assert registry.try_path_columns(models.Order, "total.value") is None
        with pytest.raises(ColumnNotFoundError):
            registry.get_path_columns(models.Order, "nope")


class TestEntityInstances:
    def test_assignment_is_validated(self, models: SimpleNamespace) -> None:
        user = models.User()
        user.name = "Ann"
        with pytest.raises(InvalidValueError, match="name@users"):
            user.name = 42

    def test_unset_column_raises_attribute_error(self, models: SimpleNamespace) -> None:
        with pytest.raises(AttributeError):
            _ = models.User().name

    def test_value_equality(self, models: SimpleNamespace) -> None:
        a, b = models.User(), models.User()
        a.name = b.name = "Ann"
        assert a == b
        b.id = 2
        assert a != b

    def test_repr(self, models: SimpleNamespace) -> None:
        user = models.User()
        user.name = "Ann"
        assert repr(user) == "User(name='Ann')"


class TestStructuralRegistration:
    def test_nested_model_keyword_reaches_column(self) -> None:
        registry = Registry()

        class Address:
            pass

        class Person:
            pass

        define(Address, "addresses", registry=registry).string("street")
        (
            define(Person, "people", registry=registry)
            .id("id")
            .array("tags", str)
            .map("scores", int)
            .object("home", Address)
        )
        assert registry.get_real_column(Person, "tags").model is str
        assert registry.get_real_column(Person, "scores").model is int
        assert registry.get_real_column(Person, "home").model is Address

    def test_join_model_keyword_reaches_column(self) -> None:
        registry = Registry()

        class Author:
            pass

        class Book:
            pass

        define(Author, "authors", registry=registry).id("id").primary("id")
        define(Book, "books", registry=registry).id("author_id").join(
            "author", "id", Author, "author_id"
        )
        assert registry.get_virtual_row(Book)["author"].model is Author

    def test_direct_assignment_with_model_property(self) -> None:
        registry = Registry()

        class Item:
            pass

        column = registry.assign_real_column(Item, "parts", model=str)
        assert column.model is str
        assert registry.assign_column(Item, "parts", model=int).model is int


class TestModelInputs:
    def test_lookups_resolve_thunks(self, registry: Registry, models: SimpleNamespace) -> None:
        assert registry.get_storage_name(lambda: models.User) == "users"
        assert list(registry.get_real_row(lambda: models.User)) == ["id", "name", "email"]
        assert registry.get_primary_column(lambda: models.User).name == "id"

    def test_lookups_reject_non_classes(self, registry: Registry) -> None:
        with pytest.raises(InvalidModelError):
            registry.get_storage_name("User")  # type: ignore[arg-type]
        with pytest.raises(InvalidModelError):
            registry.get_rows(42)  # type: ignore[arg-type]

    def test_try_column_never_raises(self, registry: Registry) -> None:
        assert registry.try_column("nope", "x") is None  # type: ignore[arg-type]
        assert registry.try_column(lambda x: x, "x") is None  # type: ignore[arg-type]


class TestRowCache:
    def test_rows_are_reused(self, registry: Registry, models: SimpleNamespace) -> None:
        first = registry.get_real_column(models.User, "name")
        assert registry.get_real_column(models.User, "name") is first

    def test_registration_refreshes_rows(
        self, registry: Registry, models: SimpleNamespace
    ) -> None:
        assert "nickname" not in registry.get_real_row(models.User)
        define(models.User, registry=registry).string("nickname")
        assert "nickname" in registry.get_real_row(models.User)

    def test_new_subclass_storage_refreshes_rows(
        self, registry: Registry, models: SimpleNamespace
    ) -> None:
        class Admin(models.User):
            pass

        assert list(registry.get_real_row(Admin)) == ["id", "name", "email"]
        define(Admin, "admins", registry=registry).integer("level")
        assert list(registry.get_real_row(Admin)) == ["id", "name", "email", "level"]
        assert registry.get_storage_name(Admin) == "admins"

    def test_parent_change_refreshes_rows(self, registry: Registry) -> None:
        class Base:
            pass

        class Child:
            pass

        define(Base, "bases", registry=registry).string("a")
        define(Child, "children", registry=registry).string("b")
        assert list(registry.get_real_row(Child)) == ["b"]
        registry.assign_storage(Child, parent=Base)
        assert list(registry.get_real_row(Child)) == ["a", "b"]
