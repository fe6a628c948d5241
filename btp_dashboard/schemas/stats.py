"""Pydantic schemas for dashboard statistics."""
from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from .facture import Money


class InvoiceStats(BaseModel):
    """Aggregate counters over a set of factures."""

    total: int = 0
    imported: int = 0
    not_imported: int = Field(default=0, alias="notImported")
    total_amount: Money = Field(default=Decimal("0.00"), alias="totalAmount")

    class Config:
        populate_by_name = True


class DateRange(BaseModel):
    """Inclusive calendar window; a ``None`` bound is empty."""

    start_date: date | None = None
    end_date: date | None = None

    @property
    def is_complete(self) -> bool:
        return self.start_date is not None and self.end_date is not None


class DashboardStats(BaseModel):
    """Statistics of the three dashboard windows."""

    weekly: InvoiceStats
    monthly: InvoiceStats
    custom: InvoiceStats
    weekly_range: DateRange
    monthly_range: DateRange
    custom_range: DateRange
