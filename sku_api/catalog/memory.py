# sku_api/catalog/memory.py
# Process-local catalog store. Used by tests and for local development
# (CATALOG_BACKEND=memory). State lives only as long as the process.
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sku_api.catalog.contracts import ProductId, TagId, sanitize_url
from sku_api.errors import CatalogError

logger = logging.getLogger("uvicorn.error")


@dataclass
class MemoryProduct:
    id: ProductId
    sku: str
    regular_price: str = ""
    sale_price: str = ""
    stock_quantity: Optional[int] = None
    manage_stock: bool = False
    description: str = ""
    short_description: str = ""
    status: str = "publish"
    featured: bool = False
    date_created: Optional[str] = None
    date_modified: Optional[str] = None
    date_on_sale_from: Optional[str] = None
    date_on_sale_to: Optional[str] = None
    image: Optional[str] = None
    gallery: List[str] = field(default_factory=list)
    category_ids: List[int] = field(default_factory=list)
    tag_ids: List[TagId] = field(default_factory=list)


class MemoryProductHandle:
    """Works on a private copy of the stored record; save() writes it back."""

    def __init__(self, store: "MemoryCatalog", record: MemoryProduct):
        self._store = store
        self._rec = copy.deepcopy(record)
        self.id = record.id

    def get_sku(self): return self._rec.sku
    def set_sku(self, sku): self._rec.sku = sku

    def get_regular_price(self): return self._rec.regular_price
    def set_regular_price(self, price): self._rec.regular_price = price
    def get_sale_price(self): return self._rec.sale_price
    def set_sale_price(self, price): self._rec.sale_price = price

    def get_stock_quantity(self): return self._rec.stock_quantity
    def set_stock_quantity(self, qty): self._rec.stock_quantity = qty
    def get_manage_stock(self): return self._rec.manage_stock
    def set_manage_stock(self, flag): self._rec.manage_stock = flag

    def get_description(self): return self._rec.description
    def set_description(self, text): self._rec.description = text
    def get_short_description(self): return self._rec.short_description
    def set_short_description(self, text): self._rec.short_description = text

    def get_status(self): return self._rec.status
    def set_status(self, status): self._rec.status = status
    def get_featured(self): return self._rec.featured
    def set_featured(self, flag): self._rec.featured = flag

    def get_date_created(self): return self._rec.date_created
    def set_date_created(self, value): self._rec.date_created = value
    def get_date_modified(self): return self._rec.date_modified
    def set_date_modified(self, value): self._rec.date_modified = value
    def get_date_on_sale_from(self): return self._rec.date_on_sale_from
    def set_date_on_sale_from(self, value): self._rec.date_on_sale_from = value
    def get_date_on_sale_to(self): return self._rec.date_on_sale_to
    def set_date_on_sale_to(self, value): self._rec.date_on_sale_to = value

    def get_image(self): return self._rec.image
    def set_image(self, url): self._rec.image = url
    def get_gallery(self): return list(self._rec.gallery)
    def set_gallery(self, urls): self._rec.gallery = list(urls)

    def get_category_ids(self): return list(self._rec.category_ids)
    def set_category_ids(self, ids): self._rec.category_ids = list(ids)
    def get_tag_ids(self): return list(self._rec.tag_ids)
    def set_tag_ids(self, ids): self._rec.tag_ids = list(ids)

    async def save(self) -> None:
        self._store._commit(copy.deepcopy(self._rec))


class MemoryCatalog:
    name = "memory"

    def __init__(self, products: Optional[List[MemoryProduct]] = None,
                 tags: Optional[Dict[TagId, str]] = None):
        self.products: Dict[ProductId, MemoryProduct] = {}
        self.tags: Dict[TagId, str] = dict(tags or {})
        for p in products or []:
            self.products[p.id] = p

    # ---- seeding helpers ----

    def add_product(self, sku: str, **fields) -> MemoryProduct:
        pid = fields.pop("id", None) or max(self.products, default=0) + 1
        rec = MemoryProduct(id=pid, sku=sku, **fields)
        self.products[pid] = rec
        return rec

    def get(self, product_id: ProductId) -> MemoryProduct:
        return self.products[product_id]

    def by_sku(self, sku: str) -> Optional[MemoryProduct]:
        for p in self.products.values():
            if p.sku == sku:
                return p
        return None

    # ---- CatalogStore ----

    async def ensure_ready(self) -> None:
        return None

    async def lookup_product_id_by_sku(self, sku: str) -> Optional[ProductId]:
        rec = self.by_sku(sku)
        return rec.id if rec else None

    async def load_product(self, product_id: ProductId) -> MemoryProductHandle:
        rec = self.products.get(product_id)
        if rec is None:
            raise CatalogError(f"product {product_id} does not exist")
        return MemoryProductHandle(self, rec)

    async def lookup_or_create_tag(self, name: str) -> TagId:
        for tid, tname in self.tags.items():
            if tname == name:
                return tid
        tid = max(self.tags, default=0) + 1
        self.tags[tid] = name
        logger.info("[MEMORY] created tag '%s' id=%s", name, tid)
        return tid

    def sanitize_url(self, raw: str) -> str:
        return sanitize_url(raw)

    def _commit(self, rec: MemoryProduct) -> None:
        self.products[rec.id] = rec
