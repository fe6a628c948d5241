"""Pydantic schemas exposed by the API layer."""
from .auth import AuthSessionRead, Credentials, UserRead
from .facture import (
    ExportRequest,
    FactureFilterParams,
    FactureListResponse,
    FactureRead,
    ImportConfirmation,
    ImportConfirmationRequest,
)
from .stats import DashboardStats, DateRange, InvoiceStats

__all__ = [
    "AuthSessionRead",
    "Credentials",
    "UserRead",
    "ExportRequest",
    "FactureFilterParams",
    "FactureListResponse",
    "FactureRead",
    "ImportConfirmation",
    "ImportConfirmationRequest",
    "DashboardStats",
    "DateRange",
    "InvoiceStats",
]
