from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

logger = logging.getLogger(__name__)

_INT_SETTINGS = ("SCRAPE_PRIMARY_WORKERS", "SCRAPE_RETRY_WORKERS")
_FLOAT_SETTINGS = (
    "SCRAPE_PRIMARY_DELAY_SECONDS",
    "SCRAPE_RETRY_DELAY_SECONDS",
    "SCRAPE_NAVIGATION_TIMEOUT_SECONDS",
    "SCRAPE_SELECTOR_TIMEOUT_SECONDS",
    "SCRAPE_CLICK_TIMEOUT_SECONDS",
)


def _validate_env() -> None:
    """
    Check database and scrape settings before anything connects.

    Every problem is collected into a single RuntimeError.
    """

    from db.config import load_env_files

    load_env_files()
    errors: list[str] = []

    def _configured(name: str) -> bool:
        return bool(os.getenv(name, "").strip())

    if not (
        _configured("DATABASE_URL")
        or _configured("LOCAL_DATABASE_URL")
        or (_configured("DB_HOST") and _configured("DB_DATABASE"))
    ):
        errors.append(
            "No database configured. Set DATABASE_URL, or DB_HOST and DB_DATABASE "
            "(with DB_PORT, DB_USER, DB_PASSWORD as needed)."
        )

    for name in _INT_SETTINGS:
        raw = os.getenv(name, "").strip()
        if raw and (not raw.isdigit() or int(raw) < 1):
            errors.append(f"{name}='{raw}' is not a positive integer.")

    for name in _FLOAT_SETTINGS:
        raw = os.getenv(name, "").strip()
        if not raw:
            continue
        try:
            float(raw)
        except ValueError:
            errors.append(f"{name}='{raw}' is not a number.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_database() -> None:
    """
    Fail startup unless the database answers and both scrape tables exist.

    Does not migrate; run `alembic upgrade head` first.
    """

    from sqlalchemy import inspect as sa_inspect
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    import db.models  # noqa: F401  registers the models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            present = set(sa_inspect(connection).get_table_names())
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc

    missing = sorted(set(Base.metadata.tables) - present)
    if missing:
        logger.critical("Tables missing from the database: %s. Run 'alembic upgrade head'.", ", ".join(missing))
        raise RuntimeError(f"Schema mismatch: missing table(s) {', '.join(missing)}.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    from db.session import dispose_engine

    _check_database()
    logger.info("Database schema validated")
    try:
        yield
    finally:
        dispose_engine()
        logger.info("Database connections closed")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Listing Refresh Scraper",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import listing_scrape_router

    application.include_router(listing_scrape_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"ok": "true"}

    return application


app = create_app()
