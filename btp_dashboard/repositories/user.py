"""Repository for user accounts."""
from __future__ import annotations

from btp_dashboard.db.models import User

from .base import Repository


class UserRepository(Repository[User]):
    """User repository with lookup helpers."""

    model = User

    def get_by_email(self, email: str) -> User | None:
        statement = self._base_query().where(self.model.email == email)
        return self.session.scalar(statement)
