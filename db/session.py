"""
db/session.py

Engine and session factory shared by request handlers and the batch thread.

Nothing connects at import time; the engine is built on the first
`SessionLocal()` call and can be torn down with `dispose_engine()`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import load_env_files, resolve_database_url


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


@dataclass(frozen=True)
class EngineOptions:
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle_seconds: int = 1800

    @classmethod
    def from_env(cls) -> "EngineOptions":
        load_env_files()
        defaults = cls()
        return cls(
            echo=os.getenv("SQL_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
            pool_size=_env_int("DB_POOL_SIZE", defaults.pool_size),
            max_overflow=_env_int("DB_MAX_OVERFLOW", defaults.max_overflow),
            pool_recycle_seconds=_env_int("DB_POOL_RECYCLE", defaults.pool_recycle_seconds),
        )


def create_db_engine(options: EngineOptions | None = None) -> Engine:
    database_url = resolve_database_url()
    if not database_url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    options = options or EngineOptions.from_env()
    return create_engine(
        database_url,
        echo=options.echo,
        pool_pre_ping=True,
        pool_recycle=options.pool_recycle_seconds,
        pool_size=options.pool_size,
        max_overflow=options.max_overflow,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def _session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)


def SessionLocal() -> Session:
    """Open a new session on the shared engine."""
    return _session_factory()()


def dispose_engine() -> None:
    """
    Close pooled connections. The next `SessionLocal()` builds a fresh engine.
    """

    if get_engine.cache_info().currsize:
        get_engine().dispose()
    _session_factory.cache_clear()
    get_engine.cache_clear()
