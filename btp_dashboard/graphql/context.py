"""GraphQL context utilities for authenticated, owner-scoped operations."""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import HTTPException, Request, status
from strawberry.fastapi import BaseContext

from btp_dashboard.core.database import SessionLocal
from btp_dashboard.core.identity import UserContext
from btp_dashboard.core.settings import Settings, get_settings
from btp_dashboard.export.spreadsheet import OpenpyxlSpreadsheetExporter, SpreadsheetExporter
from btp_dashboard.services.auth_service import AuthService
from btp_dashboard.services.date_ranges import DateRangeController
from btp_dashboard.services.exceptions import AuthError
from btp_dashboard.services.invoice_list import InvoiceListController
from btp_dashboard.store import InvoiceStore, resolve_invoice_store

BEARER_PREFIX = "bearer "


@dataclass(slots=True)
class GraphQLContext(BaseContext):
    """GraphQL-specific request context with the caller identity and collaborators."""

    user: UserContext
    store: InvoiceStore
    exporter: SpreadsheetExporter
    settings: Settings

    def invoice_list(self) -> InvoiceListController:
        return InvoiceListController(
            self.store,
            self.exporter,
            identity=self.user,
            sheet_name=self.settings.export_sheet_name,
            export_filename=self.settings.export_filename,
        )

    def date_ranges(self) -> DateRangeController:
        return DateRangeController(self.store, identity=self.user)


def build_context(token: str) -> GraphQLContext:
    """Construct a GraphQL context for the user owning ``token``."""

    settings = get_settings()
    with SessionLocal() as session:
        user = AuthService(session).resolve(token)
    return GraphQLContext(
        user=user,
        store=resolve_invoice_store(settings, SessionLocal),
        exporter=OpenpyxlSpreadsheetExporter(output_dir=settings.export_dir),
        settings=settings,
    )


def context_getter(request: Request) -> GraphQLContext:
    """FastAPI-compatible context getter for Strawberry GraphQL router."""

    authorization = request.headers.get("authorization", "")
    if not authorization.lower().startswith(BEARER_PREFIX):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return build_context(authorization[len(BEARER_PREFIX):].strip())
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
