# sku_api/errors.py
from __future__ import annotations


class SkuApiError(Exception):
    """Base class for errors raised by the update-by-sku service."""


class MalformedBatchError(SkuApiError):
    """Request body is empty, unparseable or carries no update object (HTTP 400)."""


class CatalogError(SkuApiError):
    """A catalog adapter call failed (upstream non-2xx, database error...)."""


class CatalogUnavailableError(CatalogError):
    """Catalog store is not configured or cannot be reached (HTTP 503)."""
