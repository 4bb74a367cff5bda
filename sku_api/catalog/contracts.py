#=================================================================
# sku_api/catalog/contracts.py
# Narrow interface onto the external product catalog store.
# Adapters: memory.py (dev/tests), woo_rest.py (WooCommerce REST),
# sql.py (SQLAlchemy). The update handler only talks to these.
#=================================================================
from __future__ import annotations

import re
from typing import List, Optional, Protocol, runtime_checkable
from urllib.parse import urlsplit

ProductId = int
TagId = int


@runtime_checkable
class ProductHandle(Protocol):
    """A loaded product; setters mutate in memory until save()."""

    id: ProductId

    def get_sku(self) -> str: ...
    def set_sku(self, sku: str) -> None: ...

    def get_regular_price(self) -> str: ...
    def set_regular_price(self, price) -> None: ...
    def get_sale_price(self) -> str: ...
    def set_sale_price(self, price) -> None: ...

    def get_stock_quantity(self): ...
    def set_stock_quantity(self, qty) -> None: ...
    def get_manage_stock(self) -> bool: ...
    def set_manage_stock(self, flag: bool) -> None: ...

    def get_description(self) -> str: ...
    def set_description(self, text) -> None: ...
    def get_short_description(self) -> str: ...
    def set_short_description(self, text) -> None: ...

    def get_status(self) -> str: ...
    def set_status(self, status) -> None: ...
    def get_featured(self) -> bool: ...
    def set_featured(self, flag: bool) -> None: ...

    def get_date_created(self): ...
    def set_date_created(self, value) -> None: ...
    def get_date_modified(self): ...
    def set_date_modified(self, value) -> None: ...
    def get_date_on_sale_from(self): ...
    def set_date_on_sale_from(self, value) -> None: ...
    def get_date_on_sale_to(self): ...
    def set_date_on_sale_to(self, value) -> None: ...

    def get_image(self) -> Optional[str]: ...
    def set_image(self, url: Optional[str]) -> None: ...
    def get_gallery(self) -> List[str]: ...
    def set_gallery(self, urls: List[str]) -> None: ...

    def get_category_ids(self) -> List[int]: ...
    def set_category_ids(self, ids: List[int]) -> None: ...
    def get_tag_ids(self) -> List[TagId]: ...
    def set_tag_ids(self, ids: List[TagId]) -> None: ...

    async def save(self) -> None: ...


@runtime_checkable
class CatalogStore(Protocol):
    name: str

    async def ensure_ready(self) -> None:
        """Raise CatalogUnavailableError when the store cannot serve requests."""

    async def lookup_product_id_by_sku(self, sku: str) -> Optional[ProductId]: ...

    async def load_product(self, product_id: ProductId) -> ProductHandle: ...

    async def lookup_or_create_tag(self, name: str) -> TagId: ...

    def sanitize_url(self, raw: str) -> str: ...


# ---------------------------
# Shared helpers for adapters
# ---------------------------

_CTRL_RE = re.compile(r"[\x00-\x1f\x7f]+")
# RFC 3986 unreserved + reserved + '%' (same set WordPress keeps in esc_url_raw)
_UNSAFE_RE = re.compile(r"[^A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]")
_ALLOWED_SCHEMES = {"http", "https"}


def sanitize_url(raw: str) -> str:
    """
    Strip whitespace/control characters and anything outside the URL-safe set.
    Only absolute http(s) URLs survive; everything else becomes ''.
    """
    if not isinstance(raw, str):
        return ""
    url = _CTRL_RE.sub("", raw.strip())
    url = url.replace(" ", "%20")
    url = _UNSAFE_RE.sub("", url)
    if not url:
        return ""
    try:
        parts = urlsplit(url)
    except ValueError:
        return ""
    if parts.scheme.lower() not in _ALLOWED_SCHEMES or not parts.netloc:
        return ""
    return url
