# sku_api/sku_update/fields.py
# Ordered (field, applicator) table applied to every update item.
# Order matters: scalar fields → on_sale → media → taxonomy
# (on_sale reads the regular price after it may have been changed).
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from sku_api.catalog.contracts import CatalogStore, ProductHandle

logger = logging.getLogger("uvicorn.error")

Applicator = Callable[[ProductHandle, Any, Dict[str, Any], CatalogStore], Optional[Awaitable[None]]]


def present(item: Dict[str, Any], key: str) -> bool:
    """A field counts when its key exists and it is not JSON null."""
    return item.get(key) is not None


def _setter(method: str, cast: Callable[[Any], Any] | None = None) -> Applicator:
    def apply(product, value, item, catalog):
        getattr(product, method)(cast(value) if cast else value)
    apply.__name__ = method
    return apply


def _truthy(v) -> bool:
    """Loose flag coercion: "0" and "" are false, like PHP's (bool) cast."""
    if isinstance(v, str):
        return v.strip() not in ("", "0")
    return bool(v)


def _image_url(item: Dict[str, Any], catalog) -> str:
    """Sanitized `image` URL, or "" when it is missing or unusable."""
    value = item.get("image")
    if value is None:
        return ""
    return catalog.sanitize_url(value if isinstance(value, str) else str(value))


def _as_int(v) -> Optional[int]:
    try:
        return int(v)
    except (TypeError, ValueError):
        try:
            return int(float(v))
        except (TypeError, ValueError, OverflowError):
            return None


# ---------------------------
# Derived / structured fields
# ---------------------------

def apply_on_sale(product: ProductHandle, value, item, catalog) -> None:
    if _truthy(value):
        if present(item, "sale_price"):
            product.set_sale_price(item["sale_price"])
        else:
            product.set_sale_price(product.get_regular_price())
    else:
        # sale window dates are left as they are
        product.set_sale_price("")


def apply_image(product: ProductHandle, value, item, catalog) -> None:
    url = _image_url(item, catalog)
    if not url:
        logger.info("[SKU-UPDATE] image given but not usable; media left unchanged (id=%s)", product.id)
        return
    product.set_image(None)
    product.set_gallery([url])


def apply_images(product: ProductHandle, value, item, catalog) -> None:
    if _image_url(item, catalog):
        return  # a usable singular image wins
    if not isinstance(value, list) or not value:
        return
    urls: List[str] = []
    for entry in value:
        src = entry.get("src") if isinstance(entry, dict) else None
        if not src or not isinstance(src, str):
            continue
        clean = catalog.sanitize_url(src)
        if clean:
            urls.append(clean)
    if urls:
        product.set_gallery(urls)
    else:
        logger.info("[SKU-UPDATE] images given but none usable; gallery left unchanged (id=%s)", product.id)


def apply_categories(product: ProductHandle, value, item, catalog) -> None:
    if not isinstance(value, list) or not value:
        return
    ids: List[int] = []
    for entry in value:
        if not isinstance(entry, dict) or entry.get("id") is None:
            continue
        cid = _as_int(entry["id"])
        if cid is not None:
            ids.append(cid)
    product.set_category_ids(ids)


async def apply_tags(product: ProductHandle, value, item, catalog) -> None:
    if not isinstance(value, list) or not value:
        return
    ids: List[int] = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        if entry.get("id") is not None:
            tid = _as_int(entry["id"])
            if tid is not None:
                ids.append(tid)
        elif entry.get("name"):
            ids.append(await catalog.lookup_or_create_tag(str(entry["name"])))
    product.set_tag_ids(ids)


FIELD_APPLICATORS: List[Tuple[str, Applicator]] = [
    # scalar fields
    ("regular_price", _setter("set_regular_price")),
    ("sale_price", _setter("set_sale_price")),
    ("stock_quantity", _setter("set_stock_quantity")),
    ("manage_stock", _setter("set_manage_stock", _truthy)),
    ("description", _setter("set_description")),
    ("short_description", _setter("set_short_description")),
    ("status", _setter("set_status")),
    ("featured", _setter("set_featured", _truthy)),
    ("date_created", _setter("set_date_created")),
    ("date_modified", _setter("set_date_modified")),
    ("date_on_sale_from", _setter("set_date_on_sale_from")),
    ("date_on_sale_to", _setter("set_date_on_sale_to")),
    # derived
    ("on_sale", apply_on_sale),
    # media
    ("image", apply_image),
    ("images", apply_images),
    # taxonomy
    ("categories", apply_categories),
    ("tags", apply_tags),
]
