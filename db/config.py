"""
Shared environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import quote


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_postgres_url(url: str) -> str:
    """
    Normalize postgres URLs to SQLAlchemy's psycopg driver form.
    """

    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _url_from_components() -> str | None:
    """
    Build a URL from DB_HOST / DB_PORT / DB_USER / DB_PASSWORD / DB_DATABASE.
    """

    host = os.getenv("DB_HOST", "").strip()
    database = os.getenv("DB_DATABASE", "").strip()
    if not host or not database:
        return None

    port = os.getenv("DB_PORT", "5432").strip() or "5432"
    user = quote(os.getenv("DB_USER", "").strip(), safe="")
    password = quote(os.getenv("DB_PASSWORD", ""), safe="")
    credentials = f"{user}:{password}@" if user else ""
    return f"postgresql+psycopg://{credentials}{host}:{port}/{database}"


def resolve_database_url() -> str:
    """
    Resolve database URL using environment variables and optional .env files.

    Priority:
    1) DATABASE_URL
    2) DB_HOST / DB_PORT / DB_USER / DB_PASSWORD / DB_DATABASE
    3) LOCAL_DATABASE_URL
    """

    load_env_files()

    direct_url = os.getenv("DATABASE_URL")
    if direct_url:
        return normalize_postgres_url(direct_url)

    component_url = _url_from_components()
    if component_url:
        return component_url

    local_url = os.getenv("LOCAL_DATABASE_URL")
    if local_url:
        return normalize_postgres_url(local_url)

    raise RuntimeError(
        "No database URL configured. Set DATABASE_URL, the DB_HOST / DB_DATABASE "
        "family, or LOCAL_DATABASE_URL."
    )
