#=================================================================
# sku_api/main_app.py
# FastAPI application entry-point.
#=================================================================

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from sku_api.config import settings
from sku_api.errors import CatalogUnavailableError, MalformedBatchError
from sku_api.logging_filters import install_filters
from sku_api.routes import router as sku_router
from sku_api.catalog.factory import build_catalog

# --- FastAPI instance ---
app = FastAPI(
    title="Update Product by SKU",
    description="REST endpoint to update catalog products by SKU, one at a time or in batches.",
)

# --- Logging setup (console, LOG_LEVEL) ---
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s | %(message)s"
)
logger = logging.getLogger("uvicorn.error")
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
install_filters()

# --- CORS ---
origins = settings.CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------- Include routers ----------------
app.include_router(sku_router)  # {API_NAMESPACE}/update-by-sku

# --- Root endpoint ---
@app.get("/")
async def home(request: Request):
    catalog = getattr(request.app.state, "catalog", None)
    return {
        "status": "running",
        "service": "Update Product by SKU",
        "catalog": catalog.name if catalog else settings.CATALOG_BACKEND,
    }

# --- Error handlers ---
@app.exception_handler(MalformedBatchError)
async def malformed_batch_handler(request: Request, exc: MalformedBatchError):
    logger.warning("[SKU-UPDATE] rejected request body: %s", exc)
    return JSONResponse(status_code=400, content={"error": str(exc)})

@app.exception_handler(CatalogUnavailableError)
async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailableError):
    logger.error("[SKU-UPDATE] catalog unavailable: %s", exc)
    return JSONResponse(status_code=503, content={"error": str(exc)})

# --- Global error handler (keeps full stack trace in logs) ---
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Update failed: {str(exc)}"},
    )

# ---- Catalog lifecycle ----
@app.on_event("startup")
async def _startup():
    if getattr(app.state, "catalog", None) is None:
        app.state.catalog = build_catalog(settings)
    start = getattr(app.state.catalog, "start", None)
    if start is not None:
        await start()
    logger.info("[SKU-UPDATE] routes mounted under '%s'", settings.API_NAMESPACE or "/")

@app.on_event("shutdown")
async def _shutdown():
    close = getattr(getattr(app.state, "catalog", None), "close", None)
    if close is not None:
        await close()
