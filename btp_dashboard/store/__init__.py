"""Invoice store backends and factory."""
from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from btp_dashboard.core.settings import Settings

from .base import FactureQuery, InvoiceStore
from .rest import RestInvoiceStore
from .sql import SqlInvoiceStore


def resolve_invoice_store(settings: Settings, session_factory: sessionmaker[Session]) -> InvoiceStore:
    """Return the store selected by ``STORE_BACKEND``."""

    backend = settings.store_backend.lower()
    if backend == "rest":
        if not settings.rest_url or not settings.rest_api_key:
            raise ValueError("REST_URL and REST_API_KEY must be set for the rest store backend")
        return RestInvoiceStore(
            base_url=settings.rest_url,
            api_key=settings.rest_api_key,
            table=settings.rest_table,
            timeout=settings.request_timeout,
        )
    if backend == "sql":
        return SqlInvoiceStore(session_factory)
    raise ValueError(f"Unknown store backend: {settings.store_backend}")


__all__ = [
    "FactureQuery",
    "InvoiceStore",
    "RestInvoiceStore",
    "SqlInvoiceStore",
    "resolve_invoice_store",
]
