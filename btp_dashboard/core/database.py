"""Database engine and session management utilities."""
from collections.abc import Generator
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from btp_dashboard.db import Base, models  # noqa: F401  # Ensure models are imported for metadata registration

from .settings import get_settings


def engine_options(database_url: str) -> dict[str, Any]:
    """Keyword arguments for ``create_engine`` suited to the backend.

    The SQL invoice store opens its sessions from worker threads, which
    SQLite rejects unless ``check_same_thread`` is disabled.
    """

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return {"future": True, "connect_args": {"check_same_thread": False}}
    return {"future": True, "pool_pre_ping": True}


def sqlite_database_path(database_url: str) -> Path | None:
    """Return the file behind a SQLite URL, or None for memory/server databases."""

    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return None
    return Path(url.database).expanduser().resolve()


_settings = get_settings()

ENGINE = create_engine(_settings.database_url, **engine_options(_settings.database_url))
SessionLocal = sessionmaker(bind=ENGINE, class_=Session, autoflush=False, expire_on_commit=False)


def get_db_session() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def create_database_schema() -> None:
    """Create the user, session and facture tables from ORM metadata."""

    Base.metadata.create_all(bind=ENGINE)
