"""
Example 02: Reading Stored Data

This example demonstrates building output entities from raw rows, with
field projection, aliased columns and pruning of empty nested entities.
"""

from row_mapper import MissingRequiredColumnsError, Outputer, define


class Address:
    pass


class Customer:
    pass


define(Address, "addresses").string("street").required("street").string("city")
(
    define(Customer, "customers")
    .id("id")
    .primary("id")
    .string("name")
    .required("name")
    .alias("name", "full_name")
    .object("shipping", Address)
    .object("billing", Address)
    .required("billing")
)


def main():
    outputer = Outputer()
    row = {
        "id": 7,
        "full_name": "Alice",
        "shipping": {},
        "billing": {"street": "Main", "city": "Oslo"},
    }

    print("=== Reading Stored Data ===\n")

    # Aliased columns are read by their storage name
    print("1. Full entity:")
    customer = outputer.create_full(Customer, row)
    print(f"   {customer!r}")
    print(f"   Empty optional shipping pruned: {not hasattr(customer, 'shipping')}\n")

    # Only the selected fields are read
    print("2. Projection:")
    partial = outputer.create_full(Customer, row, ["billing.city"])
    print(f"   {partial!r}\n")

    # Every missing required column is reported at once
    print("3. Missing required columns:")
    try:
        outputer.create_full(Customer, {"id": 8})
    except MissingRequiredColumnsError as e:
        print(f"   {e}")


if __name__ == "__main__":
    main()
