"""Application entrypoint and FastAPI factory."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from alembic import command
from alembic.config import Config
from strawberry.fastapi import GraphQLRouter

from btp_dashboard.api.router import router as api_router
from btp_dashboard.core.database import ENGINE, SessionLocal, create_database_schema, sqlite_database_path
from btp_dashboard.core.settings import BASE_DIR, Settings, get_settings
from btp_dashboard.graphql.context import context_getter
from btp_dashboard.graphql.schema import schema
from btp_dashboard.store import resolve_invoice_store

logger = logging.getLogger(__name__)


def _run_migrations() -> None:
    """Execute Alembic migrations; fallback to metadata create_all on failure."""

    config = Config(str(BASE_DIR / "alembic.ini"))
    try:
        command.upgrade(config, "head")
    except Exception:
        logger.warning("Alembic upgrade failed, creating schema from metadata", exc_info=True)
        create_database_schema()


def _ensure_sqlite_directory(settings: Settings) -> None:
    """If using SQLite file storage, ensure parent directory exists."""

    db_file = sqlite_database_path(settings.database_url)
    if db_file is not None:
        db_file.parent.mkdir(parents=True, exist_ok=True)


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan, ensuring shared resources are initialized/closed."""

    settings = get_settings()
    _configure_logging(settings)
    _ensure_sqlite_directory(settings)
    _run_migrations()
    store = resolve_invoice_store(settings, SessionLocal)
    app.state.settings = settings
    logger.info("%s started (%s, store=%s)", settings.app_name, settings.environment, type(store).__name__)
    try:
        yield
    finally:
        ENGINE.dispose()


def create_app() -> FastAPI:
    """Application factory used by ASGI servers."""

    settings = get_settings()
    graphql_app = GraphQLRouter(schema, path="/graphql", context_getter=context_getter)

    application = FastAPI(
        title=settings.app_name,
        description="Factures BTP: statistics, filtering and spreadsheet export.",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.include_router(api_router, prefix="/api")
    application.include_router(graphql_app, prefix="")

    return application


app = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run("btp_dashboard.main:app", host="0.0.0.0", port=8000, reload=True)
