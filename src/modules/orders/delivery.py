"""Estimated delivery date for shipped orders."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from modules.orders.constants import DELIVERY_DAYS_BY_METHOD

SATURDAY = 5
SUNDAY = 6


def estimate_delivery_date(
    shipped_on: date,
    method: str = "standard",
    lead_days: Optional[int] = None,
) -> date:
    """Add the lead time and push weekend results to Monday.

    ``lead_days`` overrides the lead time of ``method``.

    Raises:
        KeyError: unknown shipping method.
    """
    if lead_days is None:
        lead_days = DELIVERY_DAYS_BY_METHOD[method]
    estimated = shipped_on + timedelta(days=lead_days)
    if estimated.weekday() == SATURDAY:
        estimated += timedelta(days=2)
    elif estimated.weekday() == SUNDAY:
        estimated += timedelta(days=1)
    return estimated
