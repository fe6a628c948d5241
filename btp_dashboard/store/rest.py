"""Invoice store talking to a hosted PostgREST backend over HTTP."""
from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx
import pydantic

from btp_dashboard.core.identity import UserContext
from btp_dashboard.schemas.facture import FactureRead
from btp_dashboard.services.exceptions import QueryError, UpdateError

from .base import FactureQuery

logger = logging.getLogger(__name__)

# Same ordering as FactureRepository.build_filter_query.
LIST_ORDER = "date_facture.desc,id.asc"


class RestInvoiceStore:
    """Minimal PostgREST client for the facture table."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "facture_btp",
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout
        self.transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    @staticmethod
    def build_params(owner: UserContext, query: FactureQuery) -> list[tuple[str, str]]:
        params = [("select", "*"), ("user_id", f"eq.{owner.user_id}")]
        if query.importe is not None:
            params.append(("importe", f"eq.{str(query.importe).lower()}"))
        if query.start_date:
            params.append(("date_facture", f"gte.{query.start_date.isoformat()}"))
        if query.end_date:
            params.append(("date_facture", f"lte.{query.end_date.isoformat()}"))
        params.append(("order", LIST_ORDER))
        return params

    async def fetch(self, owner: UserContext, query: FactureQuery) -> list[FactureRead]:
        try:
            async with self._client() as client:
                response = await client.get(
                    self.endpoint,
                    params=self.build_params(owner, query),
                    headers=self._headers(),
                )
            response.raise_for_status()
            return [FactureRead.model_validate(row) for row in response.json()]
        except (httpx.HTTPError, pydantic.ValidationError, ValueError) as exc:
            raise QueryError("Erreur lors du chargement des factures") from exc

    async def mark_imported(self, owner: UserContext, facture_ids: Sequence[int]) -> int:
        ids = list(facture_ids)
        if not ids:
            return 0
        params = [
            ("user_id", f"eq.{owner.user_id}"),
            ("id", f"in.({','.join(str(facture_id) for facture_id in ids)})"),
        ]
        headers = {**self._headers(), "Prefer": "return=representation"}
        try:
            async with self._client() as client:
                response = await client.patch(
                    self.endpoint,
                    params=params,
                    json={"importe": True},
                    headers=headers,
                )
            response.raise_for_status()
            updated = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpdateError("Erreur lors de la mise à jour des statuts", pending_ids=ids) from exc
        logger.debug("Marked %d factures imported for %s", len(updated), owner.user_id)
        return len(updated)
