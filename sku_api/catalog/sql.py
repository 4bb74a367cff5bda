#=================================================================
# sku_api/catalog/sql.py
# Catalog store on a SQL database (SQLAlchemy async ORM).
# CATALOG_BACKEND=sql, DSN from DATABASE_URL.
#=================================================================
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from sku_api.catalog.contracts import ProductId, TagId, sanitize_url
from sku_api.db import init_db, make_engine, ping
from sku_api.errors import CatalogError, CatalogUnavailableError
from sku_api.models.catalog import Product, Tag

logger = logging.getLogger("uvicorn.error")

_SCALARS = (
    "sku", "regular_price", "sale_price", "stock_quantity", "manage_stock",
    "description", "short_description", "status", "featured",
    "date_created", "date_modified", "date_on_sale_from", "date_on_sale_to",
    "image",
)


class SqlProductHandle:
    """Wraps a detached Product row; save() merges it back in a fresh session."""

    def __init__(self, catalog: "SqlCatalog", row: Product):
        self._catalog = catalog
        self._row = row
        self.id = row.id

    def _get(self, attr):
        return getattr(self._row, attr)

    def _set(self, attr, value):
        setattr(self._row, attr, value)

    def get_sku(self): return self._get("sku")
    def set_sku(self, sku): self._set("sku", sku)

    def get_regular_price(self): return self._get("regular_price")
    def set_regular_price(self, price): self._set("regular_price", "" if price is None else str(price))
    def get_sale_price(self): return self._get("sale_price")
    def set_sale_price(self, price): self._set("sale_price", "" if price is None else str(price))

    def get_stock_quantity(self): return self._get("stock_quantity")
    def set_stock_quantity(self, qty): self._set("stock_quantity", qty)
    def get_manage_stock(self): return self._get("manage_stock")
    def set_manage_stock(self, flag): self._set("manage_stock", bool(flag))

    def get_description(self): return self._get("description")
    def set_description(self, text): self._set("description", text)
    def get_short_description(self): return self._get("short_description")
    def set_short_description(self, text): self._set("short_description", text)

    def get_status(self): return self._get("status")
    def set_status(self, status): self._set("status", status)
    def get_featured(self): return self._get("featured")
    def set_featured(self, flag): self._set("featured", bool(flag))

    def get_date_created(self): return self._get("date_created")
    def set_date_created(self, value): self._set("date_created", value)
    def get_date_modified(self): return self._get("date_modified")
    def set_date_modified(self, value): self._set("date_modified", value)
    def get_date_on_sale_from(self): return self._get("date_on_sale_from")
    def set_date_on_sale_from(self, value): self._set("date_on_sale_from", value)
    def get_date_on_sale_to(self): return self._get("date_on_sale_to")
    def set_date_on_sale_to(self, value): self._set("date_on_sale_to", value)

    def get_image(self): return self._get("image")
    def set_image(self, url): self._set("image", url)
    def get_gallery(self): return list(self._get("gallery") or [])
    def set_gallery(self, urls): self._set("gallery", list(urls))

    def get_category_ids(self): return list(self._get("category_ids") or [])
    def set_category_ids(self, ids): self._set("category_ids", list(ids))
    def get_tag_ids(self): return list(self._get("tag_ids") or [])
    def set_tag_ids(self, ids): self._set("tag_ids", list(ids))

    async def save(self) -> None:
        try:
            async with self._catalog.sessionmaker() as session:
                self._row = await session.merge(self._row)
                await session.commit()
        except IntegrityError as e:
            raise CatalogError(f"product {self.id} rejected by database: {e.orig}") from e
        except SQLAlchemyError as e:
            raise CatalogError(f"saving product {self.id} failed: {e}") from e


class SqlCatalog:
    name = "sql"

    def __init__(self, dsn: Optional[str] = None):
        self.engine, self.sessionmaker = make_engine(dsn)
        self._initialized = False

    async def start(self) -> None:
        """Create tables if needed (called on app startup and lazily on first use)."""
        if not self._initialized:
            await init_db(self.engine)
            self._initialized = True

    async def close(self) -> None:
        await self.engine.dispose()

    async def ensure_ready(self) -> None:
        try:
            await self.start()
            await ping(self.engine)
        except (SQLAlchemyError, OSError) as e:
            logger.error("[SQL] catalog not reachable: %s", e)
            raise CatalogUnavailableError(f"catalog database unavailable: {e}") from e

    async def lookup_product_id_by_sku(self, sku: str) -> Optional[ProductId]:
        async with self.sessionmaker() as session:
            res = await session.execute(select(Product.id).where(Product.sku == sku))
            return res.scalar_one_or_none()

    async def load_product(self, product_id: ProductId) -> SqlProductHandle:
        async with self.sessionmaker() as session:
            row = await session.get(Product, product_id)
        if row is None:
            raise CatalogError(f"product {product_id} does not exist")
        return SqlProductHandle(self, row)

    async def lookup_or_create_tag(self, name: str) -> TagId:
        async with self.sessionmaker() as session:
            res = await session.execute(select(Tag.id).where(Tag.name == name))
            tid = res.scalar_one_or_none()
            if tid is not None:
                return tid
            tag = Tag(name=name)
            session.add(tag)
            await session.commit()
            logger.info("[SQL] created tag '%s' id=%s", name, tag.id)
            return tag.id

    def sanitize_url(self, raw: str) -> str:
        return sanitize_url(raw)

    # ---- seeding helpers (scripts, tests) ----

    async def add_product(self, sku: str, **fields) -> ProductId:
        await self.start()
        unknown = set(fields) - set(_SCALARS) - {"id", "gallery", "category_ids", "tag_ids"}
        if unknown:
            raise ValueError(f"unknown product fields: {sorted(unknown)}")
        async with self.sessionmaker() as session:
            row = Product(sku=sku, **fields)
            session.add(row)
            await session.commit()
            return row.id

    async def get_row(self, product_id: ProductId) -> Optional[Product]:
        async with self.sessionmaker() as session:
            return await session.get(Product, product_id)
