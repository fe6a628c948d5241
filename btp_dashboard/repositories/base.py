"""Repository abstractions for database access."""
from __future__ import annotations

from typing import Generic, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from btp_dashboard.core.identity import UserContext
from btp_dashboard.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Base repository bound to a session and a mapped model."""

    model: type[ModelT]

    def __init__(self, session: Session) -> None:
        self.session = session

    def _base_query(self) -> Select[tuple[ModelT]]:
        return select(self.model)


class OwnerScopedRepository(Repository[ModelT]):
    """Repository whose queries only ever see the caller's rows."""

    def _owned_query(self, owner: UserContext) -> Select[tuple[ModelT]]:
        return self._base_query().where(self.model.user_id == owner.user_id)  # type: ignore[attr-defined]
