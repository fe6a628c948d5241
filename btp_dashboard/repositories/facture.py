"""Facture repository handling owner-scoped queries."""
from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from sqlalchemy import Select, update

from btp_dashboard.core.identity import UserContext
from btp_dashboard.db.models import Facture

from .base import OwnerScopedRepository


class FactureRepository(OwnerScopedRepository[Facture]):
    """Facture repository with filtering helpers."""

    model = Facture

    def build_filter_query(
        self,
        owner: UserContext,
        importe: bool | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Select[tuple[Facture]]:
        statement = self._owned_query(owner)
        if importe is not None:
            statement = statement.where(self.model.importe == importe)
        if start_date:
            statement = statement.where(self.model.date_facture >= start_date)
        if end_date:
            statement = statement.where(self.model.date_facture <= end_date)
        return statement.order_by(self.model.date_facture.desc(), self.model.id)

    def list_filtered(
        self,
        owner: UserContext,
        importe: bool | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Facture]:
        statement = self.build_filter_query(owner, importe=importe, start_date=start_date, end_date=end_date)
        return list(self.session.scalars(statement).all())

    def mark_imported(self, owner: UserContext, facture_ids: Iterable[int]) -> int:
        """Flag the given factures as imported in a single UPDATE statement."""

        ids = list(facture_ids)
        if not ids:
            return 0
        statement = (
            update(self.model)
            .where(self.model.user_id == owner.user_id)
            .where(self.model.id.in_(ids))
            .values(importe=True)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(statement)
        return int(result.rowcount or 0)
