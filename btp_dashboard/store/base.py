"""Invoice store contract shared by the SQL and REST backends."""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from btp_dashboard.core.identity import UserContext
from btp_dashboard.schemas.facture import FactureFilterParams, FactureRead


@dataclass(slots=True, frozen=True)
class FactureQuery:
    """Optional constraints of a facture read; ``None`` omits the constraint."""

    importe: bool | None = None
    start_date: date | None = None
    end_date: date | None = None

    @classmethod
    def from_filters(cls, filters: FactureFilterParams) -> "FactureQuery":
        return cls(importe=filters.importe, start_date=filters.start_date, end_date=filters.end_date)


class InvoiceStore(Protocol):
    """Owner-scoped reads and batched "mark imported" updates.

    Read failures raise ``QueryError`` and update failures ``UpdateError``.
    """

    async def fetch(self, owner: UserContext, query: FactureQuery) -> list[FactureRead]:
        ...

    async def mark_imported(self, owner: UserContext, facture_ids: Sequence[int]) -> int:
        ...
