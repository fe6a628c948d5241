"""Unit tests for the facture list controller and its export flow."""
from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from btp_dashboard.core.identity import UserContext
from btp_dashboard.export.spreadsheet import ExportArtifact
from btp_dashboard.schemas.facture import FactureFilterParams, FactureRead
from btp_dashboard.services.exceptions import (
    AuthError,
    ConflictError,
    EmptySelectionError,
    ExportError,
    QueryError,
    UpdateError,
    ValidationError,
)
from btp_dashboard.services.invoice_list import InvoiceListController
from btp_dashboard.store.base import FactureQuery

OWNER = UserContext(user_id="user-1", email="chef@chantier.fr")


def facture(facture_id: int, day: int, importe: bool = False, amount: str = "100.00") -> FactureRead:
    return FactureRead(
        id=facture_id,
        user_id=OWNER.user_id,
        nfacture=f"F-{facture_id:03d}",
        date_facture=date(2024, 3, day),
        description=f"Lot {facture_id}",
        quantite=Decimal("1.5"),
        montant_total=Decimal(amount),
        importe=importe,
    )


class MemoryStore:
    """In-memory store applying filters and updates like the real backends."""

    def __init__(self, records: Sequence[FactureRead], events: list[str]) -> None:
        self.records = {record.id: record for record in records}
        self.events = events
        self.fetch_calls: list[FactureQuery] = []
        self.update_calls: list[list[int]] = []
        self.fetch_error: Exception | None = None
        self.update_error: Exception | None = None

    async def fetch(self, owner: UserContext, query: FactureQuery) -> list[FactureRead]:
        self.events.append("fetch")
        self.fetch_calls.append(query)
        if self.fetch_error is not None:
            raise self.fetch_error
        rows = [
            record
            for record in self.records.values()
            if (query.importe is None or record.importe == query.importe)
            and (query.start_date is None or record.date_facture >= query.start_date)
            and (query.end_date is None or record.date_facture <= query.end_date)
        ]
        return sorted(rows, key=lambda record: (-record.date_facture.toordinal(), record.id))

    async def mark_imported(self, owner: UserContext, facture_ids: Sequence[int]) -> int:
        self.events.append("update")
        self.update_calls.append(list(facture_ids))
        if self.update_error is not None:
            raise self.update_error
        known = [facture_id for facture_id in facture_ids if facture_id in self.records]
        for facture_id in known:
            self.records[facture_id] = self.records[facture_id].model_copy(update={"importe": True})
        return len(known)


class RecordingExporter:
    def __init__(self, events: list[str]) -> None:
        self.events = events
        self.calls: list[tuple[list[dict[str, str]], str, str]] = []
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def write(self, rows, sheet_name: str, filename: str) -> ExportArtifact:
        self.events.append("export")
        self.calls.append((list(rows), sheet_name, filename))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return ExportArtifact(filename=filename, content=b"xlsx-bytes")


@pytest.fixture()
def events() -> list[str]:
    return []


@pytest.fixture()
def store(events: list[str]) -> MemoryStore:
    return MemoryStore(
        [
            facture(1, day=10, amount="100.50"),
            facture(2, day=12, amount="200.25"),
            facture(3, day=5, importe=True, amount="50.00"),
        ],
        events,
    )


@pytest.fixture()
def exporter(events: list[str]) -> RecordingExporter:
    return RecordingExporter(events)


@pytest_asyncio.fixture()
async def controller(store: MemoryStore, exporter: RecordingExporter, events: list[str]) -> InvoiceListController:
    controller = InvoiceListController(store, exporter, identity=OWNER)
    await controller.load_factures()
    events.clear()
    return controller


@pytest.mark.asyncio
async def test_load_lists_newest_first(controller: InvoiceListController) -> None:
    assert controller.listed_ids == [2, 1, 3]


@pytest.mark.asyncio
async def test_imported_filter_reloads_matching_factures(
    controller: InvoiceListController, store: MemoryStore
) -> None:
    await controller.set_imported_filter(False)

    assert store.fetch_calls[-1] == FactureQuery(importe=False)
    assert controller.listed_ids == [2, 1]

    await controller.set_imported_filter(True)
    assert controller.listed_ids == [3]


@pytest.mark.asyncio
async def test_date_bounds_reload_list(controller: InvoiceListController, store: MemoryStore) -> None:
    await controller.set_date_bound("start", date(2024, 3, 6))
    await controller.set_date_bound("end", date(2024, 3, 11))

    assert store.fetch_calls[-1] == FactureQuery(start_date=date(2024, 3, 6), end_date=date(2024, 3, 11))
    assert controller.listed_ids == [1]


@pytest.mark.asyncio
async def test_unknown_date_bound_is_rejected(controller: InvoiceListController) -> None:
    with pytest.raises(ValidationError):
        await controller.set_date_bound("middle", date(2024, 3, 6))


@pytest.mark.asyncio
async def test_reset_filters_restores_full_list(controller: InvoiceListController, store: MemoryStore) -> None:
    await controller.apply_filters(FactureFilterParams(importe=True, start_date=date(2024, 3, 1)))
    assert controller.listed_ids == [3]

    await controller.reset_filters()

    assert controller.filters == FactureFilterParams()
    assert store.fetch_calls[-1] == FactureQuery()
    assert controller.listed_ids == [2, 1, 3]


@pytest.mark.asyncio
async def test_toggle_selection_adds_and_removes(controller: InvoiceListController) -> None:
    controller.toggle_selection(1)
    controller.toggle_selection(2)
    controller.toggle_selection(1)

    assert controller.selected == {2}
    assert controller.can_export is True


@pytest.mark.asyncio
async def test_toggle_select_all(controller: InvoiceListController) -> None:
    controller.toggle_selection(1)
    assert controller.is_all_selected is False

    controller.toggle_select_all()
    assert controller.selected == {1, 2, 3}
    assert controller.is_all_selected is True

    controller.toggle_select_all()
    assert controller.selected == set()
    assert controller.can_export is False


@pytest.mark.asyncio
async def test_empty_list_is_never_all_selected(store: MemoryStore, exporter: RecordingExporter) -> None:
    store.records.clear()
    controller = InvoiceListController(store, exporter, identity=OWNER)
    await controller.load_factures()

    assert controller.is_all_selected is False
    controller.toggle_select_all()
    assert controller.selected == set()


@pytest.mark.asyncio
async def test_export_runs_write_update_reload_in_order(
    controller: InvoiceListController,
    store: MemoryStore,
    exporter: RecordingExporter,
    events: list[str],
) -> None:
    controller.select([1, 2])

    result = await controller.export_selected()

    assert events == ["export", "update", "fetch"]
    rows, sheet_name, filename = exporter.calls[0]
    assert sheet_name == "Factures"
    assert filename == "factures_export.xlsx"
    assert [row["N° Facture"] for row in rows] == ["F-002", "F-001"]
    assert rows[0] == {
        "N° Facture": "F-002",
        "Date": "12/03/2024",
        "Description": "Lot 2",
        "Quantité": "1.5",
        "Montant": "200.25 €",
        "Statut": "Non importée",
    }
    assert store.update_calls == [[1, 2]]
    assert result.imported_ids == [1, 2]
    assert result.updated == 2
    assert result.artifact.content == b"xlsx-bytes"
    assert controller.selected == set()
    assert [record.importe for record in controller.records] == [True, True, True]
    assert controller.pending_import_ids == []
    assert controller.exporting is False


@pytest.mark.asyncio
async def test_export_under_not_imported_filter_drops_exported_rows(
    controller: InvoiceListController, store: MemoryStore
) -> None:
    await controller.set_imported_filter(False)
    controller.toggle_select_all()

    await controller.export_selected()

    assert controller.records == []
    assert controller.selected == set()


@pytest.mark.asyncio
async def test_export_updates_every_selected_id_across_filter_changes(
    controller: InvoiceListController, store: MemoryStore, exporter: RecordingExporter
) -> None:
    controller.select([1, 2])
    await controller.set_imported_filter(True)
    controller.toggle_selection(3)

    result = await controller.export_selected()

    assert [row["N° Facture"] for row in exporter.calls[0][0]] == ["F-003"]
    assert store.update_calls == [[1, 2, 3]]
    assert result.imported_ids == [1, 2, 3]
    assert result.updated == 3
    assert all(record.importe for record in store.records.values())
    assert controller.selected == set()


@pytest.mark.asyncio
async def test_export_with_only_unlisted_selection_still_updates(
    controller: InvoiceListController, store: MemoryStore, exporter: RecordingExporter, events: list[str]
) -> None:
    controller.select([1])
    await controller.set_imported_filter(True)
    events.clear()

    result = await controller.export_selected()

    assert exporter.calls[0][0] == []
    assert events == ["export", "update", "fetch"]
    assert store.update_calls == [[1]]
    assert result.imported_ids == [1]
    assert store.records[1].importe is True


@pytest.mark.asyncio
async def test_export_with_empty_selection_is_rejected(
    controller: InvoiceListController, exporter: RecordingExporter, events: list[str]
) -> None:
    with pytest.raises(EmptySelectionError):
        await controller.export_selected()

    assert exporter.calls == []
    assert events == []


@pytest.mark.asyncio
async def test_export_without_identity_is_rejected(store: MemoryStore, exporter: RecordingExporter) -> None:
    controller = InvoiceListController(store, exporter)
    controller.select([1])

    with pytest.raises(AuthError):
        await controller.export_selected()

    assert exporter.calls == []


@pytest.mark.asyncio
async def test_update_failure_keeps_selection_and_list(
    controller: InvoiceListController, store: MemoryStore, events: list[str]
) -> None:
    controller.select([1, 2])
    records_before = list(controller.records)
    store.update_error = UpdateError("Erreur lors de la mise à jour des statuts", pending_ids=[2, 1])

    with pytest.raises(UpdateError) as exc_info:
        await controller.export_selected()

    error = exc_info.value
    assert error.pending_ids == [1, 2]
    assert error.artifact is not None
    assert error.artifact.content == b"xlsx-bytes"
    assert events == ["export", "update"]
    assert controller.selected == {1, 2}
    assert controller.records == records_before
    assert controller.pending_import_ids == [1, 2]
    assert controller.exporting is False


@pytest.mark.asyncio
async def test_confirm_import_retries_pending_update(
    controller: InvoiceListController, store: MemoryStore, exporter: RecordingExporter
) -> None:
    controller.select([1])
    store.update_error = UpdateError("boom", pending_ids=[1])
    with pytest.raises(UpdateError):
        await controller.export_selected()

    store.update_error = None
    updated = await controller.confirm_import()

    assert updated == 1
    assert store.update_calls == [[1], [1]]
    assert len(exporter.calls) == 1
    assert controller.pending_import_ids == []
    assert controller.selected == set()
    assert store.records[1].importe is True


@pytest.mark.asyncio
async def test_confirm_import_with_explicit_ids(controller: InvoiceListController, store: MemoryStore) -> None:
    updated = await controller.confirm_import([2])

    assert updated == 1
    assert store.update_calls == [[2]]


@pytest.mark.asyncio
async def test_confirm_import_without_ids_is_rejected(controller: InvoiceListController) -> None:
    with pytest.raises(EmptySelectionError):
        await controller.confirm_import()


@pytest.mark.asyncio
async def test_export_error_skips_status_update(
    controller: InvoiceListController, store: MemoryStore, exporter: RecordingExporter
) -> None:
    controller.select([1])
    exporter.error = ExportError("Erreur lors de la génération du fichier Excel")

    with pytest.raises(ExportError):
        await controller.export_selected()

    assert store.update_calls == []
    assert controller.selected == {1}
    assert controller.exporting is False


@pytest.mark.asyncio
async def test_unexpected_exporter_failure_is_wrapped(
    controller: InvoiceListController, store: MemoryStore, exporter: RecordingExporter
) -> None:
    controller.select([1])
    exporter.error = OSError("disk full")

    with pytest.raises(ExportError) as exc_info:
        await controller.export_selected()

    assert str(exc_info.value) == "Erreur lors de la génération du fichier Excel"
    assert isinstance(exc_info.value.__cause__, OSError)
    assert store.update_calls == []


@pytest.mark.asyncio
async def test_second_export_while_running_is_rejected(
    controller: InvoiceListController, store: MemoryStore, exporter: RecordingExporter
) -> None:
    controller.select([1])
    exporter.gate = asyncio.Event()

    first = asyncio.create_task(controller.export_selected())
    await asyncio.sleep(0)
    assert controller.exporting is True
    assert controller.can_export is False

    with pytest.raises(ConflictError):
        await controller.export_selected()

    exporter.gate.set()
    await first

    assert len(exporter.calls) == 1
    assert store.update_calls == [[1]]
    assert controller.exporting is False


@pytest.mark.asyncio
async def test_query_error_keeps_previous_records(controller: InvoiceListController, store: MemoryStore) -> None:
    store.fetch_error = QueryError("Erreur lors du chargement des factures")

    await controller.set_imported_filter(True)

    assert controller.listed_ids == [2, 1, 3]
    assert controller.filters.importe is True


@pytest.mark.asyncio
async def test_stale_list_load_is_discarded(store: MemoryStore, exporter: RecordingExporter) -> None:
    gate = asyncio.Event()
    original_fetch = store.fetch

    async def slow_first_fetch(owner: UserContext, query: FactureQuery) -> list[FactureRead]:
        if query.importe is True:
            await gate.wait()
        return await original_fetch(owner, query)

    store.fetch = slow_first_fetch  # type: ignore[method-assign]
    controller = InvoiceListController(store, exporter, identity=OWNER)

    slow = asyncio.create_task(controller.set_imported_filter(True))
    await asyncio.sleep(0)
    await controller.set_imported_filter(False)
    gate.set()
    await slow

    assert controller.listed_ids == [2, 1]


@pytest.mark.asyncio
async def test_signing_out_clears_state(controller: InvoiceListController) -> None:
    controller.select([1])
    controller.pending_import_ids = [1]

    await controller.on_identity_change(None)

    assert controller.identity is None
    assert controller.records == []
    assert controller.selected == set()
    assert controller.pending_import_ids == []


@pytest.mark.asyncio
async def test_closed_controller_ignores_loads(controller: InvoiceListController, store: MemoryStore) -> None:
    controller.close()
    calls = len(store.fetch_calls)

    await controller.reset_filters()

    assert len(store.fetch_calls) == calls
