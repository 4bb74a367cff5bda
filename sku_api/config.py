# ----------------------------------------------------------------
# Import configuration variables to be used throughout the project
# ----------------------------------------------------------------
import os
from dotenv import load_dotenv

# Load .env (allow container env to override file values)
load_dotenv(override=True)


def _rstrip_slash(s: str) -> str:
    return (s or "").rstrip("/")


def _get_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on", "y"}


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _namespace(raw: str) -> str:
    """'wc/v3/products/' → '/wc/v3/products' (empty stays empty)."""
    raw = _rstrip_slash((raw or "").strip())
    if raw and not raw.startswith("/"):
        raw = "/" + raw
    return raw


class Settings:
    # ── Endpoint ─────────────────────────────────────────────────────────────
    # Route prefix the update endpoint is mounted under (host-defined namespace)
    API_NAMESPACE: str = _namespace(os.getenv("API_NAMESPACE", "/wc/v3/products"))

    # Optional transport-level Basic Auth; leave empty when a proxy enforces it
    API_USER: str = os.getenv("API_USER", "")
    API_PASS: str = os.getenv("API_PASS", "")

    # ── Catalog store ────────────────────────────────────────────────────────
    # memory | woo | sql
    CATALOG_BACKEND: str = os.getenv("CATALOG_BACKEND", "memory").strip().lower()

    # ── WooCommerce REST (CATALOG_BACKEND=woo) ───────────────────────────────
    WC_BASE_URL: str = _rstrip_slash(os.getenv("WC_BASE_URL", ""))
    WC_API_KEY: str = os.getenv("WC_API_KEY", "")
    WC_API_SECRET: str = os.getenv("WC_API_SECRET", "")
    WC_HTTP_TIMEOUT: float = _get_float("WC_HTTP_TIMEOUT", 20.0)
    WC_VERIFY_SSL: bool = _get_bool("WC_VERIFY_SSL", True)

    # ── SQL store (CATALOG_BACKEND=sql) ──────────────────────────────────────
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/catalog.db")

    # ── CORS ─────────────────────────────────────────────────────────────────
    # Comma-separated list in .env, e.g. "https://example.com, https://foo.bar"
    CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # ── Logging ──────────────────────────────────────────────────────────────
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"


settings = Settings()
