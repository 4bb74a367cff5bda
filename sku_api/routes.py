#=======================================================================================
# sku_api/routes.py
# FastAPI routes for updating catalog products by SKU.
#
# ✅ POST {API_NAMESPACE}/update-by-sku          single object or array of objects
# ✅ POST {API_NAMESPACE}/update-by-sku/{sku}    one product, fields in the body (legacy shape)
# ✅ GET  {API_NAMESPACE}/update-by-sku/health   catalog readiness
#
# Basic auth is only enforced when API_USER/API_PASS are configured; otherwise
# the transport in front of the service is expected to authenticate callers.
#=======================================================================================

import json
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from sku_api.catalog.contracts import CatalogStore
from sku_api.catalog.factory import build_catalog
from sku_api.config import settings
from sku_api.errors import CatalogUnavailableError, MalformedBatchError
from sku_api.models.update_models import (
    ERR_NOT_FOUND,
    ERR_SKU_TAKEN,
    BatchResponse,
    ErrorResponse,
    ItemFailure,
    ItemSuccess,
    Single,
)
from sku_api.sku_update.handler import BatchSkuUpdateHandler

logger = logging.getLogger("uvicorn.error")

# ---------------------------
# Transport-level Basic auth (optional)
# ---------------------------
security = HTTPBasic(auto_error=False)

def verify_client(credentials: Optional[HTTPBasicCredentials] = Depends(security)):
    if not (settings.API_USER and settings.API_PASS):
        return
    if credentials is None:
        ok_user = ok_pass = False
    else:
        ok_user = secrets.compare_digest(credentials.username or "", settings.API_USER)
        ok_pass = secrets.compare_digest(credentials.password or "", settings.API_PASS)
    if not (ok_user and ok_pass):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Basic"},
        )

router = APIRouter(
    prefix=settings.API_NAMESPACE,
    tags=["Update by SKU"],
    dependencies=[Depends(verify_client)],
)

# ---------------------------
# Dependencies
# ---------------------------
def get_catalog(request: Request) -> CatalogStore:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        catalog = build_catalog(settings)
        request.app.state.catalog = catalog
    return catalog

def get_handler(catalog: CatalogStore = Depends(get_catalog)) -> BatchSkuUpdateHandler:
    return BatchSkuUpdateHandler(catalog)

# ---------------------------
# Routes
# ---------------------------
@router.post(
    "/update-by-sku",
    response_model=BatchResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def update_by_sku(request: Request, handler: BatchSkuUpdateHandler = Depends(get_handler)):
    """
    Body: one update object or an array of them, each with `sku` plus the
    fields to change. Always 200 once the body is readable; per-item
    failures are reported in `results`.
    """
    raw = await request.body()
    return await handler.handle_raw(raw)


@router.post(
    "/update-by-sku/{sku}",
    response_model=ItemSuccess,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse},
               409: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def update_one_by_sku(sku: str, request: Request,
                            handler: BatchSkuUpdateHandler = Depends(get_handler)):
    """Single product, SKU in the path; outcome mapped to plain HTTP status codes."""
    try:
        raw = (await request.body()).decode("utf-8")
        fields = json.loads(raw) if raw.strip() else {}
    except ValueError:
        raise MalformedBatchError("request body must be a JSON object")
    if not isinstance(fields, dict):
        raise MalformedBatchError("request body must be a JSON object")

    result = (await handler.handle(Single({**fields, "sku": sku}))).results[0]
    if isinstance(result, ItemFailure):
        code = {ERR_NOT_FOUND: 404, ERR_SKU_TAKEN: 409}.get(result.error, 400)
        return JSONResponse(status_code=code, content={"error": result.error})
    return result


@router.get("/update-by-sku/health")
async def update_by_sku_health(catalog: CatalogStore = Depends(get_catalog)):
    try:
        await catalog.ensure_ready()
    except CatalogUnavailableError as e:
        return JSONResponse(status_code=503, content={"ready": False, "catalog": catalog.name, "error": str(e)})
    return {"ready": True, "catalog": catalog.name}
