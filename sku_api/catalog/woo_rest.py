#==========================================================================================
# sku_api/catalog/woo_rest.py
# Catalog store backed by the WooCommerce REST API (wp-json/wc/v3).
# Product handles collect changed fields and PUT them in one request on save().
#==========================================================================================
from __future__ import annotations

import html
import logging
from typing import Any, Dict, List, Optional

import httpx

from sku_api.catalog.contracts import ProductId, TagId, sanitize_url
from sku_api.config import settings
from sku_api.errors import CatalogError, CatalogUnavailableError

logger = logging.getLogger("uvicorn.error")

API_PATH = "/wp-json/wc/v3"


def _short(text: str, limit: int = 300) -> str:
    text = (text or "").strip()
    return text if len(text) <= limit else text[:limit] + "…"


class WooProductHandle:
    """
    Read from the fetched product JSON, write into a pending change-set.
    WooCommerce's images list is [featured, *gallery]; we keep the featured
    entry as-is (by media id) unless it is cleared.
    """

    def __init__(self, catalog: "WooRestCatalog", data: Dict[str, Any]):
        self._catalog = catalog
        self._data = data
        self._changes: Dict[str, Any] = {}
        self.id = int(data["id"])
        images = data.get("images") or []
        self._primary: Optional[Dict[str, Any]] = images[0] if images else None
        self._gallery: List[str] = [i.get("src") for i in images[1:] if i.get("src")]
        self._images_dirty = False

    @property
    def changes(self) -> Dict[str, Any]:
        out = dict(self._changes)
        if self._images_dirty:
            out["images"] = self._images_payload()
        return out

    def _get(self, key, default=None):
        if key in self._changes:
            return self._changes[key]
        return self._data.get(key, default)

    def _set(self, key, value):
        self._changes[key] = value

    def get_sku(self): return self._get("sku", "")
    def set_sku(self, sku): self._set("sku", sku)

    # Woo wants prices as strings
    def get_regular_price(self): return self._get("regular_price", "")
    def set_regular_price(self, price): self._set("regular_price", "" if price is None else str(price))
    def get_sale_price(self): return self._get("sale_price", "")
    def set_sale_price(self, price): self._set("sale_price", "" if price is None else str(price))

    def get_stock_quantity(self): return self._get("stock_quantity")
    def set_stock_quantity(self, qty): self._set("stock_quantity", qty)
    def get_manage_stock(self): return bool(self._get("manage_stock", False))
    def set_manage_stock(self, flag): self._set("manage_stock", bool(flag))

    def get_description(self): return self._get("description", "")
    def set_description(self, text): self._set("description", text)
    def get_short_description(self): return self._get("short_description", "")
    def set_short_description(self, text): self._set("short_description", text)

    def get_status(self): return self._get("status", "")
    def set_status(self, status): self._set("status", status)
    def get_featured(self): return bool(self._get("featured", False))
    def set_featured(self, flag): self._set("featured", bool(flag))

    def get_date_created(self): return self._get("date_created")
    def set_date_created(self, value): self._set("date_created", value)
    def get_date_modified(self): return self._get("date_modified")
    def set_date_modified(self, value): self._set("date_modified", value)
    def get_date_on_sale_from(self): return self._get("date_on_sale_from")
    def set_date_on_sale_from(self, value): self._set("date_on_sale_from", value)
    def get_date_on_sale_to(self): return self._get("date_on_sale_to")
    def set_date_on_sale_to(self, value): self._set("date_on_sale_to", value)

    def get_image(self):
        return (self._primary or {}).get("src")

    def set_image(self, url):
        self._primary = {"src": url} if url else None
        self._images_dirty = True

    def get_gallery(self):
        return list(self._gallery)

    def set_gallery(self, urls):
        self._gallery = list(urls)
        self._images_dirty = True

    def get_category_ids(self):
        return [c["id"] for c in self._get("categories", []) if isinstance(c, dict) and "id" in c]

    def set_category_ids(self, ids):
        self._set("categories", [{"id": int(i)} for i in ids])

    def get_tag_ids(self):
        return [t["id"] for t in self._get("tags", []) if isinstance(t, dict) and "id" in t]

    def set_tag_ids(self, ids):
        self._set("tags", [{"id": int(i)} for i in ids])

    def _images_payload(self) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        if self._primary:
            # re-use the existing attachment instead of re-sideloading it
            ref = {"id": self._primary["id"]} if self._primary.get("id") else {"src": self._primary.get("src")}
            out.append(ref)
        out.extend({"src": u} for u in self._gallery)
        return out

    async def save(self) -> None:
        payload = self.changes
        if not payload:
            logger.info("[WOO] product id=%s: nothing to save", self.id)
            return
        data = await self._catalog.request("PUT", f"products/{self.id}", json=payload)
        if isinstance(data, dict):
            self._data = data
        self._changes = {}
        self._images_dirty = False


class WooRestCatalog:
    name = "woo"

    def __init__(self, base_url: str = None, api_key: str = None, api_secret: str = None,
                 timeout: float = None, verify: bool = None,
                 transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = (base_url if base_url is not None else settings.WC_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.WC_API_KEY
        self.api_secret = api_secret if api_secret is not None else settings.WC_API_SECRET
        self.timeout = timeout if timeout is not None else settings.WC_HTTP_TIMEOUT
        self.verify = verify if verify is not None else settings.WC_VERIFY_SSL
        self._transport = transport  # httpx.MockTransport in tests

    # ---- HTTP ----

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.base_url}{API_PATH}/",
            auth=(self.api_key, self.api_secret),
            timeout=self.timeout,
            verify=self.verify,
            transport=self._transport,
        )

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        async with self._client() as client:
            try:
                return await client.request(method, path, **kwargs)
            except httpx.HTTPError as e:
                logger.error("[WOO] %s %s failed: %s", method, path, e)
                raise CatalogError(f"WooCommerce request {method} {path} failed: {e}") from e

    async def request(self, method: str, path: str, **kwargs) -> Any:
        resp = await self._send(method, path, **kwargs)
        if resp.status_code >= 400:
            logger.error("[WOO] %s %s → HTTP %s: %s", method, path, resp.status_code, _short(resp.text))
            raise CatalogError(f"WooCommerce {method} {path} returned HTTP {resp.status_code}")
        return resp.json() if resp.content else None

    # ---- CatalogStore ----

    async def ensure_ready(self) -> None:
        missing = [n for n, v in (("WC_BASE_URL", self.base_url),
                                  ("WC_API_KEY", self.api_key),
                                  ("WC_API_SECRET", self.api_secret)) if not v]
        if missing:
            raise CatalogUnavailableError(f"WooCommerce catalog not configured (missing {', '.join(missing)})")

    async def lookup_product_id_by_sku(self, sku: str) -> Optional[ProductId]:
        if not sku:
            return None
        found = await self.request("GET", "products", params={"sku": sku, "per_page": 10, "status": "any"})
        for p in found or []:
            # Woo search can be fuzzy; only trust an exact SKU match
            if isinstance(p, dict) and p.get("sku") == sku:
                return int(p["id"])
        return None

    async def load_product(self, product_id: ProductId) -> WooProductHandle:
        data = await self.request("GET", f"products/{product_id}")
        if not isinstance(data, dict) or "id" not in data:
            raise CatalogError(f"WooCommerce returned no product for id={product_id}")
        return WooProductHandle(self, data)

    async def lookup_or_create_tag(self, name: str) -> TagId:
        found = await self.request("GET", "products/tags", params={"search": name, "per_page": 100})
        for t in found or []:
            # names come back HTML-escaped ("A &amp; B")
            if isinstance(t, dict) and html.unescape(t.get("name") or "") == name:
                return int(t["id"])

        resp = await self._send("POST", "products/tags", json={"name": name})
        body = resp.json() if resp.content else {}
        if resp.status_code < 400:
            logger.info("[WOO] created tag '%s' id=%s", name, body.get("id"))
            return int(body["id"])
        # raced with another writer: Woo reports the existing term id
        if isinstance(body, dict) and body.get("code") == "term_exists":
            existing = (body.get("data") or {}).get("resource_id")
            if existing is not None:
                return int(existing)
        logger.error("[WOO] creating tag '%s' → HTTP %s: %s", name, resp.status_code, _short(resp.text))
        raise CatalogError(f"WooCommerce could not create tag '{name}' (HTTP {resp.status_code})")

    def sanitize_url(self, raw: str) -> str:
        return sanitize_url(raw)
