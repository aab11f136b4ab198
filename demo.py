#!/usr/bin/env python
from sdk.catalog import CatalogAPIError, CatalogClient


def main():
    c = CatalogClient()

    # -----------------------------
    # Create
    # -----------------------------
    print("Creating product...")
    widget = c.create_product("Widget", 9.99, "http://x/y.png")
    print(widget)

    # -----------------------------
    # Update price
    # -----------------------------
    print("\nUpdating price...")
    widget = c.update_product(widget.id, price=12.5)
    print(widget)

    # -----------------------------
    # Delete
    # -----------------------------
    print("\nDeleting product...")
    print(c.delete_product(widget.id))

    # -----------------------------
    # List (the widget should be gone)
    # -----------------------------
    print("\nListing products...")
    products = c.list_products()
    print([p.name for p in products])
    print("widget present:", any(p.id == widget.id for p in products))

    # deleting twice is a 404
    try:
        c.delete_product(widget.id)
    except CatalogAPIError as e:
        print("\nSecond delete:", e)


if __name__ == "__main__":
    main()
