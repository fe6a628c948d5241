"""Pydantic schemas for facture endpoints."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
Quantity = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class FactureRead(BaseModel):
    """Facture representation returned to clients."""

    id: int
    user_id: str
    nfacture: str
    date_facture: date
    description: str | None = None
    quantite: Quantity = Field(default=Decimal("0"), ge=0)
    montant_total: Money = Field(default=Decimal("0"), ge=0)
    importe: bool = False
    url_facture: str = ""

    class Config:
        from_attributes = True


class FactureFilterParams(BaseModel):
    """Query parameters for facture listing.

    ``importe`` is tri-state: ``None`` leaves the imported flag unconstrained.
    """

    importe: bool | None = None
    start_date: date | None = None
    end_date: date | None = None


class FactureListResponse(BaseModel):
    """Owner-scoped facture list."""

    items: list[FactureRead]
    total: int


class ExportRequest(BaseModel):
    """Selection to export, resolved against the list matching ``filters``."""

    ids: list[int] = Field(default_factory=list)
    filters: FactureFilterParams = Field(default_factory=FactureFilterParams)


class ImportConfirmationRequest(BaseModel):
    """Ids to flag as imported after a previous export."""

    ids: list[int] = Field(default_factory=list)


class ImportConfirmation(BaseModel):
    updated: int
