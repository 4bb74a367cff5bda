# Load products into the SQL catalog (CATALOG_BACKEND=sql) from a JSON file.
# Usage: python -m sku_api.scripts.seed_sql_catalog products.json [--dsn sqlite+aiosqlite:///./data/catalog.db]
# File: array of {"sku": "...", "regular_price": "...", ...}; existing SKUs are skipped.

import json
import asyncio
import argparse

from sku_api.catalog.sql import SqlCatalog


async def seed(catalog, products):
    created, skipped = [], []
    for p in products:
        p = dict(p)
        sku = p.pop("sku", None)
        if not sku:
            continue
        if await catalog.lookup_product_id_by_sku(sku):
            skipped.append(sku)
            continue
        await catalog.add_product(sku, **p)
        created.append(sku)
    return {"created": created, "skipped": skipped}


async def _run(path, dsn):
    with open(path, "r", encoding="utf-8") as f:
        products = json.load(f)
    catalog = SqlCatalog(dsn)
    try:
        await catalog.start()
        return await seed(catalog, products if isinstance(products, list) else [products])
    finally:
        await catalog.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed the SQL product catalog")
    parser.add_argument("path")
    parser.add_argument("--dsn", default=None)
    args = parser.parse_args(argv)
    res = asyncio.run(_run(args.path, args.dsn))
    print(f"created={len(res['created'])} skipped={len(res['skipped'])}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
