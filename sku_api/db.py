# sku_api/db.py
from __future__ import annotations

import pathlib
import logging
from typing import Optional, Tuple

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    async_sessionmaker,
    AsyncSession,
)
from sqlalchemy.orm import DeclarativeBase

from sku_api.config import settings

logger = logging.getLogger("uvicorn.error")


class Base(DeclarativeBase):
    pass


def _resolve_dsn(dsn: Optional[str] = None) -> str:
    """
    Prefer the explicit DSN, then settings.DATABASE_URL,
    else default to a local SQLite database under ./data/.
    """
    dsn = dsn or settings.DATABASE_URL or "sqlite+aiosqlite:///./data/catalog.db"

    # If using SQLite, make sure the folder exists so SQLAlchemy can create the file.
    if dsn.startswith("sqlite") and ":memory:" not in dsn:
        try:
            # Handle sqlite+aiosqlite:///./data/catalog.db
            # or sqlite+aiosqlite:////code/data/catalog.db
            sep = "///" if "///" in dsn else "//"
            path_part = dsn.split(sep, 1)[1] if sep in dsn else ""
            if path_part:
                path = pathlib.Path(path_part).resolve()
                path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("[DB] Could not ensure SQLite directory exists: %s", e)

    return dsn


def make_engine(dsn: Optional[str] = None) -> Tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """
    Create an AsyncEngine and its session factory for the given DSN.
    """
    dsn = _resolve_dsn(dsn)
    engine = create_async_engine(
        dsn,
        echo=False,
        pool_pre_ping=True,
    )
    sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
    logger.info("[DB] engine initialized for %s", engine.url.render_as_string(hide_password=True))
    return engine, sessionmaker


async def init_db(engine: AsyncEngine) -> None:
    """
    Ensure a first connection can be acquired and the catalog tables exist.
    """
    # register ORM tables on Base.metadata
    from sku_api.models import catalog  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.error("[DB] initial connect failed: %s", e)
        raise


async def ping(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
