"""Order and OrderStatusHistory models.

Business rules implemented:
- One order per quotation (``quotation`` is a one-to-one relation).
- ``company`` and ``quotation`` are never reassigned; ``total_amount`` is
  fixed at creation from the pricing collaborator.
- Orders are never deleted (``PROTECT`` everywhere they are referenced).
- Every status change is recorded in ``OrderStatusHistory``, an append-only
  ledger: existing entries cannot be saved again, updated in bulk or deleted.

Rows are only mutated through the repositories in
``modules.orders.repositories``; application code works with the immutable
snapshots defined in ``modules.orders.dtos``.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import LedgerImmutableError


class Order(BaseModel):
    company: models.ForeignKey = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    quotation: models.OneToOneField = models.OneToOneField(
        "quotations.Quotation",
        on_delete=models.PROTECT,
        related_name="order",
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    estimated_delivery_date: models.DateField = models.DateField(null=True, blank=True)
    tracking_number: models.CharField = models.CharField(  # noqa: DJ01
        max_length=100, null=True, blank=True
    )
    nfe_access_key: models.CharField = models.CharField(  # noqa: DJ01
        max_length=44, null=True, blank=True
    )
    nfe_url: models.URLField = models.URLField(  # noqa: DJ01
        max_length=500, null=True, blank=True
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["company", "status"], name="orders_company_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Order {self.pk} ({self.status})"


class LedgerQuerySet(models.QuerySet):
    """QuerySet refusing bulk mutation of ledger rows."""

    def update(self, **kwargs):
        raise LedgerImmutableError("Order history entries cannot be updated.")

    def delete(self):
        raise LedgerImmutableError("Order history entries cannot be deleted.")


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``from_status`` is ``NULL`` only for the entry written when the order is
    created.  ``changed_by`` is the company whose user requested the change.
    Corrections are made by appending a new entry, never by editing one.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="status_history",
    )
    from_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    to_status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    changed_by: models.ForeignKey = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order_status_changes",
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    objects = LedgerQuerySet.as_manager()

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        if not self._state.adding:
            raise LedgerImmutableError("Order history entries cannot be updated.")
        super().save(*args, **kwargs)

    def delete(self, using=None, keep_parents=False):
        raise LedgerImmutableError("Order history entries cannot be deleted.")

    def __str__(self) -> str:
        return f"{self.order_id} : {self.from_status} -> {self.to_status}"
