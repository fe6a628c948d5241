"""HTTP exception helpers for service-layer errors."""
from __future__ import annotations

from fastapi import HTTPException, status

from btp_dashboard.services.exceptions import (
    AuthError,
    ConflictError,
    ExportError,
    QueryError,
    ServiceError,
    UpdateError,
    ValidationError,
)


def map_service_error(exc: ServiceError) -> HTTPException:
    """Translate service-layer errors into HTTP exceptions."""

    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, AuthError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        )
    if isinstance(exc, (QueryError, UpdateError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    if isinstance(exc, ExportError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal service error")
