"""Strawberry GraphQL schema definition."""
from __future__ import annotations

from collections.abc import Awaitable
from datetime import date
from typing import TypeVar

import strawberry
from graphql import GraphQLError
from strawberry.types import Info

from btp_dashboard.graphql.context import GraphQLContext
from btp_dashboard.schemas.facture import FactureFilterParams, FactureRead
from btp_dashboard.schemas.stats import DashboardStats, DateRange, InvoiceStats
from btp_dashboard.services.exceptions import ServiceError

ResultType = TypeVar("ResultType")


async def _guard(operation: Awaitable[ResultType]) -> ResultType:
    try:
        return await operation
    except ServiceError as exc:
        raise GraphQLError(str(exc)) from exc


@strawberry.type
class HealthCheck:
    """Simple health payload for initial schema bootstrap."""

    status: str


@strawberry.type
class FactureType:
    id: int
    nfacture: str
    date_facture: date
    description: str | None
    quantite: float
    montant_total: float
    importe: bool
    url_facture: str


@strawberry.type
class FactureListType:
    items: list[FactureType]
    total: int


@strawberry.type
class InvoiceStatsType:
    total: int
    imported: int
    not_imported: int
    total_amount: float


@strawberry.type
class DateRangeType:
    start_date: date | None
    end_date: date | None


@strawberry.type
class DashboardType:
    weekly: InvoiceStatsType
    monthly: InvoiceStatsType
    custom: InvoiceStatsType
    weekly_range: DateRangeType
    monthly_range: DateRangeType
    custom_range: DateRangeType


@strawberry.type
class ImportConfirmationType:
    updated: int


@strawberry.input
class FactureFilterInput:
    importe: bool | None = None
    start_date: date | None = None
    end_date: date | None = None


def _to_facture_type(facture: FactureRead) -> FactureType:
    return FactureType(
        id=facture.id,
        nfacture=facture.nfacture,
        date_facture=facture.date_facture,
        description=facture.description,
        quantite=float(facture.quantite),
        montant_total=float(facture.montant_total),
        importe=facture.importe,
        url_facture=facture.url_facture,
    )


def _to_stats_type(stats: InvoiceStats) -> InvoiceStatsType:
    return InvoiceStatsType(
        total=stats.total,
        imported=stats.imported,
        not_imported=stats.not_imported,
        total_amount=float(stats.total_amount),
    )


def _to_range_type(window: DateRange) -> DateRangeType:
    return DateRangeType(start_date=window.start_date, end_date=window.end_date)


def _to_dashboard_type(snapshot: DashboardStats) -> DashboardType:
    return DashboardType(
        weekly=_to_stats_type(snapshot.weekly),
        monthly=_to_stats_type(snapshot.monthly),
        custom=_to_stats_type(snapshot.custom),
        weekly_range=_to_range_type(snapshot.weekly_range),
        monthly_range=_to_range_type(snapshot.monthly_range),
        custom_range=_to_range_type(snapshot.custom_range),
    )


def _build_facture_filters(filters: FactureFilterInput | None) -> FactureFilterParams:
    if filters is None:
        return FactureFilterParams()
    return FactureFilterParams(
        importe=filters.importe,
        start_date=filters.start_date,
        end_date=filters.end_date,
    )


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field(description="Basic service liveness check")
    def health(self) -> HealthCheck:
        return HealthCheck(status="ok")

    @strawberry.field(description="List the caller's factures with optional filters")
    async def factures(
        self,
        info: Info[GraphQLContext, None],
        filters: FactureFilterInput | None = None,
    ) -> FactureListType:
        controller = info.context.invoice_list()
        await _guard(controller.apply_filters(_build_facture_filters(filters)))
        return FactureListType(
            items=[_to_facture_type(item) for item in controller.records],
            total=len(controller.records),
        )

    @strawberry.field(description="Statistics over an inclusive date window")
    async def stats(
        self,
        info: Info[GraphQLContext, None],
        start_date: date,
        end_date: date,
    ) -> InvoiceStatsType:
        controller = info.context.date_ranges()
        await _guard(controller.set_custom_range(start_date, end_date))
        return _to_stats_type(controller.custom)

    @strawberry.field(description="Weekly, monthly and custom statistics")
    async def dashboard(
        self,
        info: Info[GraphQLContext, None],
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> DashboardType:
        controller = info.context.date_ranges()
        if start_date is not None:
            controller.custom_range = controller.custom_range.model_copy(update={"start_date": start_date})
        if end_date is not None:
            controller.custom_range = controller.custom_range.model_copy(update={"end_date": end_date})
        await _guard(controller.refresh_all())
        return _to_dashboard_type(controller.snapshot())


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    @strawberry.mutation(description="Flag factures as imported")
    async def confirm_import(
        self,
        info: Info[GraphQLContext, None],
        ids: list[int],
    ) -> ImportConfirmationType:
        controller = info.context.invoice_list()
        updated = await _guard(controller.confirm_import(ids))
        return ImportConfirmationType(updated=updated)


schema = strawberry.Schema(query=Query, mutation=Mutation)
