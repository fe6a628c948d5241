"""Dashboard statistics over the weekly, monthly and custom date windows."""
from __future__ import annotations

import asyncio
import calendar
import logging
from collections.abc import Callable
from datetime import date, timedelta
from enum import Enum

from btp_dashboard.core.identity import UserContext
from btp_dashboard.schemas.stats import DashboardStats, DateRange, InvoiceStats
from btp_dashboard.store.base import FactureQuery, InvoiceStore

from .exceptions import QueryError, ValidationError
from .stats import aggregate

logger = logging.getLogger(__name__)


class RangeKind(str, Enum):
    """Date windows shown on the dashboard."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


BOUND_FIELDS = {
    "start": "start_date",
    "start_date": "start_date",
    "end": "end_date",
    "end_date": "end_date",
}


def week_bounds(day: date) -> DateRange:
    """Monday to Sunday of the week containing ``day``."""

    monday = day - timedelta(days=day.weekday())
    return DateRange(start_date=monday, end_date=monday + timedelta(days=6))


def month_bounds(day: date) -> DateRange:
    last_day = calendar.monthrange(day.year, day.month)[1]
    return DateRange(start_date=day.replace(day=1), end_date=day.replace(day=last_day))


def resolve_bound_field(which: str) -> str:
    try:
        return BOUND_FIELDS[which]
    except KeyError:
        raise ValidationError(f"Unknown date bound: {which}") from None


class DateRangeController:
    """Owns the three dashboard windows and their statistics.

    Every fetch carries an issuance token per window; a result is applied only
    while its token is still the latest one issued for that window and the
    controller has not been closed. Older requests are left to finish and
    their results are dropped.
    """

    def __init__(
        self,
        store: InvoiceStore,
        identity: UserContext | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.identity = identity
        current_day = today()
        self.weekly_range = week_bounds(current_day)
        self.monthly_range = month_bounds(current_day)
        self.custom_range = DateRange(start_date=current_day, end_date=current_day)
        self.weekly = InvoiceStats()
        self.monthly = InvoiceStats()
        self.custom = InvoiceStats()
        self._issued: dict[RangeKind, int] = {kind: 0 for kind in RangeKind}
        self._closed = False

    def range_for(self, kind: RangeKind) -> DateRange:
        return {
            RangeKind.WEEKLY: self.weekly_range,
            RangeKind.MONTHLY: self.monthly_range,
            RangeKind.CUSTOM: self.custom_range,
        }[kind]

    def stats_for(self, kind: RangeKind) -> InvoiceStats:
        return getattr(self, kind.value)

    async def on_identity_change(self, identity: UserContext | None) -> None:
        self.identity = identity
        if identity is not None:
            await self.refresh_all()

    async def refresh_all(self) -> None:
        await asyncio.gather(
            self.refresh(RangeKind.WEEKLY),
            self.refresh(RangeKind.MONTHLY),
            self.refresh(RangeKind.CUSTOM),
        )

    async def set_bound(self, which: str, value: date | None) -> None:
        """Edit one bound of the custom window and refresh its statistics."""

        field = resolve_bound_field(which)
        self.custom_range = self.custom_range.model_copy(update={field: value})
        await self.refresh(RangeKind.CUSTOM)

    async def set_custom_range(self, start_date: date | None, end_date: date | None) -> None:
        self.custom_range = DateRange(start_date=start_date, end_date=end_date)
        await self.refresh(RangeKind.CUSTOM)

    async def refresh(self, kind: RangeKind) -> None:
        owner = self.identity
        if owner is None or self._closed:
            return
        window = self.range_for(kind)
        if not window.is_complete:
            return

        self._issued[kind] += 1
        token = self._issued[kind]
        try:
            records = await self.store.fetch(
                owner,
                FactureQuery(start_date=window.start_date, end_date=window.end_date),
            )
        except QueryError as exc:
            logger.warning("Error fetching %s stats: %s", kind.value, exc)
            return

        if self._closed or token != self._issued[kind] or self.identity != owner:
            logger.debug("Discarding stale %s stats (token %d)", kind.value, token)
            return
        setattr(self, kind.value, aggregate(records))

    def close(self) -> None:
        """Stop applying results; outstanding fetches are abandoned."""

        self._closed = True

    def snapshot(self) -> DashboardStats:
        return DashboardStats(
            weekly=self.weekly,
            monthly=self.monthly,
            custom=self.custom,
            weekly_range=self.weekly_range,
            monthly_range=self.monthly_range,
            custom_range=self.custom_range,
        )
