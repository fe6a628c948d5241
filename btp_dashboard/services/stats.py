"""Aggregate statistics over facture sets."""
from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from btp_dashboard.schemas.stats import InvoiceStats

CENT = Decimal("0.01")


def _as_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def aggregate(records: Iterable[Any]) -> InvoiceStats:
    """Count imported/not imported factures and sum their total amount.

    Amounts are accumulated as ``Decimal`` and quantised to cents once, after
    the sum, so the result does not depend on the order of ``records``.
    """

    total = 0
    imported = 0
    amount = Decimal("0")
    for record in records:
        total += 1
        if record.importe:
            imported += 1
        amount += _as_decimal(record.montant_total)

    return InvoiceStats(
        total=total,
        imported=imported,
        not_imported=total - imported,
        total_amount=amount.quantize(CENT),
    )
