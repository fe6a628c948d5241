"""Account and session REST endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from btp_dashboard.api.dependencies import get_auth_service, get_bearer_token
from btp_dashboard.api.errors import map_service_error
from btp_dashboard.schemas.auth import AuthSessionRead, Credentials, UserRead
from btp_dashboard.services.auth_service import AuthService
from btp_dashboard.services.exceptions import AuthError, ServiceError

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sign-up", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def sign_up(
    payload: Credentials,
    service: AuthService = Depends(get_auth_service),
) -> UserRead:
    """Create an account."""

    try:
        return service.sign_up(payload)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/sign-in", response_model=AuthSessionRead)
def sign_in(
    payload: Credentials,
    service: AuthService = Depends(get_auth_service),
) -> AuthSessionRead:
    """Exchange credentials for a bearer token."""

    try:
        return service.sign_in(payload)
    except ServiceError as exc:
        raise map_service_error(exc) from exc


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(
    token: str = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service),
) -> Response:
    service.sign_out(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
