"""Invoice store backed by the local SQLAlchemy database."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from btp_dashboard.core.identity import UserContext
from btp_dashboard.repositories.facture import FactureRepository
from btp_dashboard.schemas.facture import FactureRead
from btp_dashboard.services.exceptions import QueryError, UpdateError

from .base import FactureQuery

logger = logging.getLogger(__name__)


class SqlInvoiceStore:
    """Run repository calls in a worker thread, one session per call."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    async def fetch(self, owner: UserContext, query: FactureQuery) -> list[FactureRead]:
        return await asyncio.to_thread(self._fetch, owner, query)

    async def mark_imported(self, owner: UserContext, facture_ids: Sequence[int]) -> int:
        return await asyncio.to_thread(self._mark_imported, owner, list(facture_ids))

    def _fetch(self, owner: UserContext, query: FactureQuery) -> list[FactureRead]:
        try:
            with self.session_factory() as session:
                rows = FactureRepository(session).list_filtered(
                    owner,
                    importe=query.importe,
                    start_date=query.start_date,
                    end_date=query.end_date,
                )
                return [FactureRead.model_validate(row) for row in rows]
        except SQLAlchemyError as exc:
            raise QueryError("Erreur lors du chargement des factures") from exc

    def _mark_imported(self, owner: UserContext, facture_ids: list[int]) -> int:
        with self.session_factory() as session:
            try:
                updated = FactureRepository(session).mark_imported(owner, facture_ids)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise UpdateError(
                    "Erreur lors de la mise à jour des statuts",
                    pending_ids=facture_ids,
                ) from exc
        logger.debug("Marked %d factures imported for %s", updated, owner.user_id)
        return updated
