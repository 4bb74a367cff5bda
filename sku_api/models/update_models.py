# sku_api/models/update_models.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field

from sku_api.errors import MalformedBatchError

EMPTY_BODY_ERROR = "at least one object with sku and data to update is required"

MSG_UPDATED = "product updated successfully"
ERR_NO_SKU = "SKU not specified"
ERR_NOT_FOUND = "product not found"
ERR_SKU_TAKEN = "new SKU already exists on another product"


# ---------------------------
# Request side: BatchInput = Single | Many
# ---------------------------

@dataclass(frozen=True)
class Single:
    item: dict

    def items(self) -> List[Any]:
        return [self.item]


@dataclass(frozen=True)
class Many:
    entries: list

    def items(self) -> List[Any]:
        return list(self.entries)


BatchInput = Union[Single, Many]


def parse_batch(raw: bytes | str | None) -> BatchInput:
    """
    Decode a raw request body into a BatchInput.

    A non-empty JSON array is a batch; a non-empty JSON object is a single
    update. Anything else (empty body, invalid JSON, {}, [], scalars) raises
    MalformedBatchError.
    """
    if raw is None:
        raise MalformedBatchError(EMPTY_BODY_ERROR)
    try:
        if isinstance(raw, bytes):
            # strict: invalid UTF-8 is a malformed body, not text to repair
            raw = raw.decode("utf-8")
        if not raw.strip():
            raise MalformedBatchError(EMPTY_BODY_ERROR)
        data = json.loads(raw)
    except ValueError:
        raise MalformedBatchError(EMPTY_BODY_ERROR)
    return to_batch_input(data)


def to_batch_input(data: Any) -> BatchInput:
    if isinstance(data, list) and data:
        return Many(data)
    if isinstance(data, dict) and data:
        return Single(data)
    raise MalformedBatchError(EMPTY_BODY_ERROR)


# ---------------------------
# Response side
# ---------------------------

class ItemSuccess(BaseModel):
    message: str = Field(MSG_UPDATED)
    id: int = Field(..., description="Catalog product ID")
    sku: str = Field(..., description="SKU as requested (before any rename)")


class ItemFailure(BaseModel):
    sku: Optional[str] = Field(None, description="Requested SKU, null when missing")
    error: str


ItemResult = Union[ItemSuccess, ItemFailure]


class BatchResponse(BaseModel):
    updated: int = 0
    failed: int = 0
    results: List[Union[ItemSuccess, ItemFailure]] = Field(default_factory=list)

    def add(self, result: ItemResult) -> None:
        self.results.append(result)
        if isinstance(result, ItemFailure):
            self.failed += 1
        else:
            self.updated += 1


class ErrorResponse(BaseModel):
    error: str
