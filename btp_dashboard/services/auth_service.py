"""Authentication service: sign-up, sign-in, sign-out and token resolution."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from btp_dashboard.core.identity import UserContext
from btp_dashboard.repositories.auth_session import AuthSessionRepository
from btp_dashboard.repositories.user import UserRepository
from btp_dashboard.schemas.auth import AuthSessionRead, Credentials, UserRead
from btp_dashboard.utils.security import hash_password, new_token, token_digest, verify_password

from .exceptions import AuthError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Identifiants invalides"
EMAIL_TAKEN = "Un compte existe déjà pour cet email"
INVALID_SESSION = "Session invalide ou expirée"


class AuthService:
    """Service responsible for account and session lifecycle actions."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session)
        self.sessions = AuthSessionRepository(session)

    def sign_up(self, payload: Credentials) -> UserRead:
        email = self._normalize_email(payload.email)
        if self.users.get_by_email(email) is not None:
            raise AuthError(EMAIL_TAKEN)

        user = self.users.model(email=email, password_hash=hash_password(payload.password))
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as exc:  # pragma: no cover - concurrent sign-up race
            self.session.rollback()
            raise AuthError(EMAIL_TAKEN) from exc
        self.session.refresh(user)
        logger.info("Created account %s", user.id)
        return UserRead.model_validate(user)

    def sign_in(self, payload: Credentials) -> AuthSessionRead:
        user = self.users.get_by_email(self._normalize_email(payload.email))
        if user is None or not verify_password(payload.password, user.password_hash):
            raise AuthError(INVALID_CREDENTIALS)

        token = new_token()
        self.session.add(self.sessions.model(user_id=user.id, token_digest=token_digest(token)))
        self.session.commit()
        return AuthSessionRead(access_token=token, user=UserRead.model_validate(user))

    def sign_out(self, token: str) -> None:
        record = self.sessions.get_by_digest(token_digest(token))
        if record is None:
            return
        self.session.delete(record)
        self.session.commit()

    def resolve(self, token: str) -> UserContext:
        """Return the identity bound to a bearer token."""

        record = self.sessions.get_by_digest(token_digest(token))
        if record is None:
            raise AuthError(INVALID_SESSION)
        user = record.user
        return UserContext(user_id=str(user.id), email=user.email)

    @staticmethod
    def _normalize_email(email: str) -> str:
        return email.strip().lower()
