"""
Example 01: Declaring Entities

This example demonstrates registering entity classes, validated column
assignment and turning caller data into entities and back.
"""

from row_mapper import Inputer, InvalidValueError, Normalizer, ReadOnlyViolation, define, entity


class Address:
    pass


@entity("users")
class User:
    pass


define(Address).string("street").required("street").string("city")
(
    define(User)
    .id("id")
    .primary("id")
    .string("name", 1, 64)
    .required("name")
    .string("email")
    .hidden("email")
    .timestamp("created_at")
    .read_only("created_at")
    .object("address", Address)
)


def main():
    inputer = Inputer()
    normalizer = Normalizer()

    print("=== Declaring Entities ===\n")

    # Build an entity from caller data
    print("1. Create a user:")
    user = inputer.create_full(
        User,
        {"id": 1, "name": "Alice", "email": "alice@example.com", "address": {"street": "Main"}},
    )
    print(f"   {user!r}\n")

    # Assignments are checked against the column formats
    print("2. Assign an invalid value:")
    try:
        user.name = 42
    except InvalidValueError as e:
        print(f"   Rejected: {e}\n")

    # Read-only columns can't come from callers
    print("3. Supply a read-only column:")
    try:
        inputer.create(User, {"created_at": "2024-01-01"})
    except ReadOnlyViolation as e:
        print(f"   Rejected: {e}\n")

    # Hidden columns stay out of normalized data unless asked for
    print("4. Normalize:")
    print(f"   safe:   {normalizer.create(User, user)}")
    print(f"   unsafe: {normalizer.create(User, user, unsafe=True)}")
    print(f"   unroll: {normalizer.create(User, user, unroll=True)}")


if __name__ == "__main__":
    main()
