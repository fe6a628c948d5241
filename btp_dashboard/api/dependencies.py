"""FastAPI dependency utilities for authenticated, owner-scoped access."""
from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from btp_dashboard.core.database import SessionLocal, get_db_session
from btp_dashboard.core.identity import UserContext
from btp_dashboard.core.settings import Settings, get_settings
from btp_dashboard.export.spreadsheet import OpenpyxlSpreadsheetExporter, SpreadsheetExporter
from btp_dashboard.schemas.facture import FactureFilterParams
from btp_dashboard.services.auth_service import AuthService
from btp_dashboard.services.date_ranges import DateRangeController
from btp_dashboard.services.exceptions import AuthError
from btp_dashboard.services.invoice_list import InvoiceListController
from btp_dashboard.store import InvoiceStore, resolve_invoice_store

bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Extract the bearer token from the Authorization header."""

    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_auth_service(session: Session = Depends(get_db_session)) -> AuthService:
    """Provide auth service with database session."""

    return AuthService(session)


def get_user_context(
    token: str = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service),
) -> UserContext:
    """Resolve the authenticated identity for the request."""

    try:
        return service.resolve(token)
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_invoice_store(settings: Settings = Depends(get_settings)) -> InvoiceStore:
    """Provide the configured invoice store."""

    return resolve_invoice_store(settings, SessionLocal)


def get_exporter(settings: Settings = Depends(get_settings)) -> SpreadsheetExporter:
    """Provide the spreadsheet exporter."""

    return OpenpyxlSpreadsheetExporter(output_dir=settings.export_dir)


def get_invoice_list_controller(
    user: UserContext = Depends(get_user_context),
    store: InvoiceStore = Depends(get_invoice_store),
    exporter: SpreadsheetExporter = Depends(get_exporter),
    settings: Settings = Depends(get_settings),
) -> InvoiceListController:
    """Provide a facture list controller bound to the current user."""

    return InvoiceListController(
        store,
        exporter,
        identity=user,
        sheet_name=settings.export_sheet_name,
        export_filename=settings.export_filename,
    )


def get_date_range_controller(
    user: UserContext = Depends(get_user_context),
    store: InvoiceStore = Depends(get_invoice_store),
) -> DateRangeController:
    """Provide a dashboard statistics controller bound to the current user."""

    return DateRangeController(store, identity=user)


def get_facture_filters(params: FactureFilterParams = Depends()) -> FactureFilterParams:
    """Expose facture filters via dependency injection."""

    return params
