"""Repository for signed-in sessions."""
from __future__ import annotations

from btp_dashboard.db.models import AuthSession

from .base import Repository


class AuthSessionRepository(Repository[AuthSession]):
    """Resolve and revoke bearer token sessions."""

    model = AuthSession

    def get_by_digest(self, token_digest: str) -> AuthSession | None:
        statement = self._base_query().where(self.model.token_digest == token_digest)
        return self.session.scalar(statement)
