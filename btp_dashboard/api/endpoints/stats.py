"""Dashboard statistics REST endpoints."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from btp_dashboard.api.dependencies import get_date_range_controller
from btp_dashboard.schemas.stats import DashboardStats, InvoiceStats
from btp_dashboard.services.date_ranges import DateRangeController

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=InvoiceStats)
async def range_stats(
    start_date: date = Query(...),
    end_date: date = Query(...),
    controller: DateRangeController = Depends(get_date_range_controller),
) -> InvoiceStats:
    """Statistics over an inclusive date window."""

    await controller.set_custom_range(start_date, end_date)
    return controller.custom


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard(
    start_date: date | None = None,
    end_date: date | None = None,
    controller: DateRangeController = Depends(get_date_range_controller),
) -> DashboardStats:
    """Weekly, monthly and custom statistics in one payload.

    Without a custom window, the custom statistics cover today.
    """

    if start_date is not None or end_date is not None:
        controller.custom_range = controller.custom_range.model_copy(
            update={
                key: value
                for key, value in (("start_date", start_date), ("end_date", end_date))
                if value is not None
            }
        )
    await controller.refresh_all()
    return controller.snapshot()
