"""Pricing collaborator seam.

The catalog pricing algorithm (tier discounts, freight...) is owned by
another part of the marketplace.  The order lifecycle only asks for the
grand total of a quotation at conversion time and stores it verbatim.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from django.db.models import DecimalField, ExpressionWrapper, F, Sum

from modules.quotations.models import QuotationItem

CENTS = Decimal("0.01")


class IPricingService(ABC):
    @abstractmethod
    def grand_total(self, quotation_id: int) -> Decimal:
        """Return the validated grand total for the quotation."""


class QuotationItemsPricingService(IPricingService):
    """Grand total as the sum of ``quantity * unit_price`` over the items."""

    def grand_total(self, quotation_id: int) -> Decimal:
        line_total = ExpressionWrapper(
            F("quantity") * F("unit_price"),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
        total = QuotationItem.objects.filter(quotation_id=quotation_id).aggregate(
            total=Sum(line_total)
        )["total"]
        return Decimal(total or 0).quantize(CENTS)
