# sku_api/catalog/factory.py
from __future__ import annotations

import logging

from sku_api.catalog.contracts import CatalogStore
from sku_api.config import Settings, settings as default_settings

logger = logging.getLogger("uvicorn.error")

BACKENDS = ("memory", "woo", "sql")


def build_catalog(cfg: Settings | None = None) -> CatalogStore:
    """Instantiate the catalog adapter selected by CATALOG_BACKEND."""
    cfg = cfg or default_settings
    backend = (cfg.CATALOG_BACKEND or "memory").lower()

    if backend == "memory":
        from sku_api.catalog.memory import MemoryCatalog
        catalog = MemoryCatalog()
    elif backend == "woo":
        from sku_api.catalog.woo_rest import WooRestCatalog
        catalog = WooRestCatalog(
            base_url=cfg.WC_BASE_URL,
            api_key=cfg.WC_API_KEY,
            api_secret=cfg.WC_API_SECRET,
            timeout=cfg.WC_HTTP_TIMEOUT,
            verify=cfg.WC_VERIFY_SSL,
        )
    elif backend == "sql":
        from sku_api.catalog.sql import SqlCatalog
        catalog = SqlCatalog(cfg.DATABASE_URL)
    else:
        raise ValueError(f"Unknown CATALOG_BACKEND '{backend}' (expected one of {', '.join(BACKENDS)})")

    logger.info("[CATALOG] using '%s' backend", catalog.name)
    return catalog
