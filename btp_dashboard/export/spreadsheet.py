"""Spreadsheet export of selected factures."""
from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import Protocol

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from btp_dashboard.schemas.facture import FactureRead
from btp_dashboard.services.exceptions import ExportError

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

COLUMNS = ("N° Facture", "Date", "Description", "Quantité", "Montant", "Statut")
STATUS_IMPORTED = "Importée"
STATUS_NOT_IMPORTED = "Non importée"
CURRENCY_SUFFIX = "€"

Row = Mapping[str, str]


@dataclass(slots=True, frozen=True)
class ExportArtifact:
    """Downloadable file produced by an exporter."""

    filename: str
    content: bytes
    media_type: str = XLSX_MEDIA_TYPE
    path: Path | None = None


class SpreadsheetExporter(Protocol):
    async def write(self, rows: Sequence[Row], sheet_name: str, filename: str) -> ExportArtifact:
        ...


def status_label(importe: bool) -> str:
    return STATUS_IMPORTED if importe else STATUS_NOT_IMPORTED


def format_amount(amount: Decimal) -> str:
    return f"{amount:.2f} {CURRENCY_SUFFIX}"


def format_quantity(quantity: Decimal) -> str:
    return format(quantity.normalize(), "f")


def build_export_rows(records: Iterable[FactureRead]) -> list[dict[str, str]]:
    """Map factures onto the exported columns, in the given order."""

    rows: list[dict[str, str]] = []
    for record in records:
        rows.append(
            {
                "N° Facture": record.nfacture,
                "Date": record.date_facture.strftime("%d/%m/%Y"),
                "Description": record.description or "",
                "Quantité": format_quantity(record.quantite),
                "Montant": format_amount(record.montant_total),
                "Statut": status_label(record.importe),
            }
        )
    return rows


class OpenpyxlSpreadsheetExporter:
    """Write rows into a single-sheet xlsx workbook.

    The workbook is built in memory; with ``output_dir`` set it is also saved
    to disk through a temporary file renamed into place, so a failed export
    never leaves a partial file behind.
    """

    def __init__(self, output_dir: Path | None = None) -> None:
        self.output_dir = output_dir

    async def write(self, rows: Sequence[Row], sheet_name: str, filename: str) -> ExportArtifact:
        try:
            return await asyncio.to_thread(self._write, list(rows), sheet_name, filename)
        except ExportError:
            raise
        except Exception as exc:
            logger.exception("Spreadsheet generation failed for %s", filename)
            raise ExportError("Erreur lors de la génération du fichier Excel") from exc

    def _write(self, rows: list[Row], sheet_name: str, filename: str) -> ExportArtifact:
        content = self.render(rows, sheet_name)
        path = self._persist(content, filename) if self.output_dir is not None else None
        return ExportArtifact(filename=filename, content=content, path=path)

    @staticmethod
    def render(rows: Sequence[Row], sheet_name: str) -> bytes:
        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = sheet_name

        headers = list(rows[0].keys()) if rows else list(COLUMNS)
        worksheet.append(headers)
        for row in rows:
            worksheet.append([row.get(header, "") for header in headers])

        for index, header in enumerate(headers, start=1):
            width = max([len(header)] + [len(str(row.get(header, ""))) for row in rows])
            worksheet.column_dimensions[get_column_letter(index)].width = min(width + 2, 60)

        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    def _persist(self, content: bytes, filename: str) -> Path:
        assert self.output_dir is not None
        self.output_dir.mkdir(parents=True, exist_ok=True)
        target = self.output_dir / filename
        fd, tmp_name = tempfile.mkstemp(dir=self.output_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(content)
            os.replace(tmp_name, target)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return target
