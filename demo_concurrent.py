import asyncio
from sdk.shopclient import ShopClient

CATEGORY = "concurrent_demo"

async def main():
    c = ShopClient(base_url="http://127.0.0.1:3000")

    before = {p["id"] for p in c.list_products(CATEGORY)}

    # fire creates for one category at the same time
    print("\n⚡ Creating 10 products concurrently...")
    created = await asyncio.gather(*[
        c.create_product_async(CATEGORY, {"name": f"item-{i}"}) for i in range(10)
    ])
    ids = [p["id"] for p in created]
    print("🆔 Assigned ids:", sorted(ids))

    after = c.list_products(CATEGORY)
    new_records = [p for p in after if p["id"] not in before]
    if len(set(ids)) == len(ids) and len(new_records) == len(ids):
        print("✅ Every create got its own id and survived in the catalog")
    else:
        # only happens with TUTUSHOP_SERIALIZE_WRITES=false on the server
        print(f"⚠️  Lost updates: {len(ids)} creates, {len(new_records)} records kept, ids {ids}")

if __name__ == "__main__":
    asyncio.run(main())
