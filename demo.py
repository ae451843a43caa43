#!/usr/bin/env python
from sdk.shopclient import ShopClient

def main():
    c = ShopClient(base_url="http://127.0.0.1:3000")

    print("Health:", c.health())

    # -----------------------------
    # Create products
    # -----------------------------
    print("\nCreating products...")
    latte = c.create_product("coffee", {"name": "Latte", "price": 4.5})
    mocha = c.create_product("coffee", {"name": "Mocha", "price": 5.0, "tags": ["chocolate"]})
    print(latte)
    print(mocha)

    # -----------------------------
    # Read back
    # -----------------------------
    print("\nListing coffee...")
    print(c.list_products("coffee"))
    print("\nGet by id:", c.get_product("coffee", latte["id"]))

    # -----------------------------
    # Partial update
    # -----------------------------
    print("\nRaising the latte price...")
    print(c.update_product("coffee", latte["id"], {"price": 5.0}))

    # -----------------------------
    # Delete
    # -----------------------------
    print("\nDeleting the mocha...")
    print(c.delete_product("coffee", mocha["id"]))
    print(c.list_products("coffee"))

if __name__ == "__main__":
    main()
