"""Facture list state: filters, selection and export with status update."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from btp_dashboard.core.identity import UserContext
from btp_dashboard.export.spreadsheet import ExportArtifact, SpreadsheetExporter, build_export_rows
from btp_dashboard.schemas.facture import FactureFilterParams, FactureRead
from btp_dashboard.store.base import FactureQuery, InvoiceStore

from .date_ranges import resolve_bound_field
from .exceptions import AuthError, ConflictError, EmptySelectionError, ExportError, QueryError, UpdateError

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "Factures"
DEFAULT_EXPORT_FILENAME = "factures_export.xlsx"


@dataclass(slots=True, frozen=True)
class ExportResult:
    artifact: ExportArtifact
    imported_ids: list[int]
    updated: int


class InvoiceListController:
    """Stateful model of the factures page.

    ``export_selected`` runs three ordered steps: write the spreadsheet, flag
    the exported factures as imported in one batched update, then reload and
    clear the selection. A failed update keeps the list and the selection as
    they were and leaves the ids in ``pending_import_ids`` for
    ``confirm_import``.
    """

    def __init__(
        self,
        store: InvoiceStore,
        exporter: SpreadsheetExporter,
        identity: UserContext | None = None,
        sheet_name: str = DEFAULT_SHEET_NAME,
        export_filename: str = DEFAULT_EXPORT_FILENAME,
    ) -> None:
        self.store = store
        self.exporter = exporter
        self.identity = identity
        self.sheet_name = sheet_name
        self.export_filename = export_filename
        self.filters = FactureFilterParams()
        self.records: list[FactureRead] = []
        self.selected: set[int] = set()
        self.pending_import_ids: list[int] = []
        self.exporting = False
        self._issued = 0
        self._closed = False

    @property
    def listed_ids(self) -> list[int]:
        return [record.id for record in self.records]

    @property
    def is_all_selected(self) -> bool:
        listed = set(self.listed_ids)
        return bool(listed) and listed <= self.selected

    @property
    def can_export(self) -> bool:
        return bool(self.selected) and not self.exporting

    async def on_identity_change(self, identity: UserContext | None) -> None:
        self.identity = identity
        if identity is None:
            self.records = []
            self.selected.clear()
            self.pending_import_ids = []
            return
        await self.load_factures()

    async def load_factures(self) -> None:
        owner = self.identity
        if owner is None or self._closed:
            return

        self._issued += 1
        token = self._issued
        try:
            records = await self.store.fetch(owner, FactureQuery.from_filters(self.filters))
        except QueryError as exc:
            logger.warning("Erreur lors du chargement des factures: %s", exc)
            return

        if self._closed or token != self._issued or self.identity != owner:
            logger.debug("Discarding stale facture list (token %d)", token)
            return
        self.records = records

    async def set_imported_filter(self, importe: bool | None) -> None:
        self.filters = self.filters.model_copy(update={"importe": importe})
        await self.load_factures()

    async def set_date_bound(self, which: str, value: date | None) -> None:
        field = resolve_bound_field(which)
        self.filters = self.filters.model_copy(update={field: value})
        await self.load_factures()

    async def apply_filters(self, filters: FactureFilterParams) -> None:
        self.filters = filters
        await self.load_factures()

    async def reset_filters(self) -> None:
        self.filters = FactureFilterParams()
        await self.load_factures()

    def toggle_selection(self, facture_id: int) -> None:
        if facture_id in self.selected:
            self.selected.discard(facture_id)
        else:
            self.selected.add(facture_id)

    def toggle_select_all(self) -> None:
        if self.is_all_selected:
            self.selected.clear()
        else:
            self.selected = set(self.listed_ids)

    def select(self, facture_ids: Iterable[int]) -> None:
        self.selected = set(facture_ids)

    def selected_records(self) -> list[FactureRead]:
        """Selected factures in list order; ids missing from the list are skipped."""

        return [record for record in self.records if record.id in self.selected]

    async def export_selected(self) -> ExportResult:
        if not self.selected:
            raise EmptySelectionError("Aucune facture sélectionnée")
        if self.exporting:
            raise ConflictError("Un export est déjà en cours")
        owner = self.identity
        if owner is None:
            raise AuthError("Session invalide ou expirée")

        records = self.selected_records()
        selected_ids = sorted(self.selected)

        self.exporting = True
        try:
            artifact = await self._write_spreadsheet(records)
            try:
                updated = await self.store.mark_imported(owner, selected_ids)
            except UpdateError as exc:
                self.pending_import_ids = selected_ids
                logger.error("Erreur lors de la mise à jour des statuts: %s", exc)
                raise UpdateError(str(exc), pending_ids=selected_ids, artifact=artifact) from exc

            self.pending_import_ids = []
            await self.load_factures()
            self.selected.clear()
        finally:
            self.exporting = False

        logger.info("Exported %d factures to %s", len(records), artifact.filename)
        return ExportResult(artifact=artifact, imported_ids=selected_ids, updated=updated)

    async def confirm_import(self, facture_ids: Iterable[int] | None = None) -> int:
        """Retry the "mark imported" step on its own, without re-exporting."""

        ids = list(facture_ids) if facture_ids is not None else list(self.pending_import_ids)
        if not ids:
            raise EmptySelectionError("Aucune facture à confirmer")
        owner = self.identity
        if owner is None:
            raise AuthError("Session invalide ou expirée")

        updated = await self.store.mark_imported(owner, ids)
        self.pending_import_ids = [facture_id for facture_id in self.pending_import_ids if facture_id not in ids]
        await self.load_factures()
        self.selected.clear()
        return updated

    def close(self) -> None:
        self._closed = True

    async def _write_spreadsheet(self, records: list[FactureRead]) -> ExportArtifact:
        rows = build_export_rows(records)
        try:
            return await self.exporter.write(rows, self.sheet_name, self.export_filename)
        except ExportError:
            raise
        except Exception as exc:
            logger.exception("Spreadsheet export failed")
            raise ExportError("Erreur lors de la génération du fichier Excel") from exc
