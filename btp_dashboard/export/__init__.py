"""Spreadsheet exporters."""
from .spreadsheet import (
    ExportArtifact,
    OpenpyxlSpreadsheetExporter,
    SpreadsheetExporter,
    build_export_rows,
)

__all__ = [
    "ExportArtifact",
    "OpenpyxlSpreadsheetExporter",
    "SpreadsheetExporter",
    "build_export_rows",
]
