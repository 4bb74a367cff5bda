#=================================================================
# sku_api/sku_update/handler.py
# Batch SKU Update Handler: resolve each item by SKU, apply the
# whitelisted fields through the catalog, save, and aggregate one
# result per item. Item failures never abort the batch.
#=================================================================
from __future__ import annotations

import inspect
import logging
from typing import Any, Dict

from sku_api.catalog.contracts import CatalogStore
from sku_api.models.update_models import (
    ERR_NO_SKU,
    ERR_NOT_FOUND,
    ERR_SKU_TAKEN,
    MSG_UPDATED,
    BatchInput,
    BatchResponse,
    ItemFailure,
    ItemResult,
    ItemSuccess,
    parse_batch,
)
from sku_api.sku_update.fields import FIELD_APPLICATORS, present

logger = logging.getLogger("uvicorn.error")


async def maybe_await(x):
    if inspect.isawaitable(x):
        return await x
    return x


class BatchSkuUpdateHandler:
    def __init__(self, catalog: CatalogStore, applicators=None):
        self.catalog = catalog
        self.applicators = list(applicators or FIELD_APPLICATORS)

    async def handle_raw(self, raw: bytes | str | None) -> BatchResponse:
        """Parse a raw body (MalformedBatchError → HTTP 400) then run the batch."""
        return await self.handle(parse_batch(raw))

    async def handle(self, batch: BatchInput) -> BatchResponse:
        await self.catalog.ensure_ready()
        items = batch.items()
        logger.info("[SKU-UPDATE] batch of %d item(s) via %s catalog", len(items), self.catalog.name)

        response = BatchResponse()
        for idx, item in enumerate(items):
            result = await self.update_item(item)
            if isinstance(result, ItemFailure):
                logger.warning("[SKU-UPDATE] #%d sku=%s failed: %s", idx, result.sku, result.error)
            else:
                logger.info("[SKU-UPDATE] #%d sku=%s updated (id=%s)", idx, result.sku, result.id)
            response.add(result)
        return response

    async def update_item(self, item: Any) -> ItemResult:
        if not isinstance(item, dict):
            return ItemFailure(sku=None, error=ERR_NO_SKU)

        sku = item.get("sku")
        if not sku:
            return ItemFailure(sku=None, error=ERR_NO_SKU)
        sku = str(sku)

        product_id = await self.catalog.lookup_product_id_by_sku(sku)
        if not product_id:
            return ItemFailure(sku=sku, error=ERR_NOT_FOUND)

        product = await self.catalog.load_product(product_id)

        # SKU rename goes first; a collision skips every other field
        # an empty new_sku is treated as absent, like an empty sku
        if item.get("new_sku"):
            new_sku = str(item["new_sku"])
            if new_sku != product.get_sku():
                owner = await self.catalog.lookup_product_id_by_sku(new_sku)
                if owner and owner != product_id:
                    return ItemFailure(sku=sku, error=ERR_SKU_TAKEN)
                product.set_sku(new_sku)

        await self.apply_fields(product, item)
        await product.save()
        return ItemSuccess(message=MSG_UPDATED, id=product_id, sku=sku)

    async def apply_fields(self, product, item: Dict[str, Any]) -> None:
        for name, apply in self.applicators:
            if not present(item, name):
                continue
            await maybe_await(apply(product, item[name], item, self.catalog))
