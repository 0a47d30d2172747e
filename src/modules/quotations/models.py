"""Quotation and QuotationItem models.

Quotations are owned by the quoting workflow; the order lifecycle only
reads ``status``, ``valid_until`` and ``company`` and flips a processed
quotation to ``completed`` when it is converted into an order.

Quotations keep integer primary keys: clients reference them as
``quotationId: int``.
"""

from __future__ import annotations

from django.core.validators import MinValueValidator
from django.db import models

from modules.quotations.constants import QuotationStatus


class Quotation(models.Model):
    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        related_name="quotations",
    )
    status = models.CharField(
        max_length=20,
        choices=QuotationStatus.choices,
        default=QuotationStatus.PENDING,
    )
    valid_until = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "quotations"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["company", "status"], name="quotations_company_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Quotation #{self.pk} ({self.status})"


class QuotationItem(models.Model):
    """Priced line of a quotation, consumed by the pricing collaborator."""

    quotation = models.ForeignKey(
        "quotations.Quotation",
        on_delete=models.CASCADE,
        related_name="items",
    )
    description = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = "quotation_items"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.description} x{self.quantity}"
