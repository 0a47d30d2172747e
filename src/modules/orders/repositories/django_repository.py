"""Django ORM implementation of the Order repository and history ledger.

Satisfies ``IOrderRepository`` and ``IOrderHistoryLedger`` using Django's
QuerySet API.  ORM rows never leave this module: every method converts to
the immutable DTOs in ``modules.orders.dtos``.

Concurrency control on mutations uses ``select_for_update()``; callers
(``OrderLifecycleService``) hold the lock for the whole transaction.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, QuerySet, Sum
from django.utils import timezone

from modules.orders.constants import OrderStatus
from modules.orders.dtos import (
    OrderDetailDTO,
    OrderPage,
    OrderQueryFilter,
    OrderSnapshot,
    PeriodTotalsDTO,
    StatusHistoryEntryDTO,
)
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderHistoryLedger, IOrderRepository

logger = structlog.get_logger(__name__)

SECONDS_PER_DAY = 86400


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: UUID) -> Optional[OrderSnapshot]:
        order = _first(Order.objects.all(), id)
        return OrderSnapshot.from_entity(order) if order else None

    def get_detail(self, id: UUID) -> Optional[OrderDetailDTO]:
        """Retrieve an order with eager-loaded relations.

        ``select_related`` for the quotation (single JOIN) and
        ``prefetch_related`` for the status history.  Prevents N+1.
        """
        order = _first(
            Order.objects.select_related("quotation").prefetch_related("status_history"),
            id,
        )
        return OrderDetailDTO.from_entity(order) if order else None

    def get_for_update(self, id: UUID) -> Optional[OrderSnapshot]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""
        order = _first(Order.objects.select_for_update(), id)
        return OrderSnapshot.from_entity(order) if order else None

    def list(self, filters: OrderQueryFilter) -> OrderPage:
        queryset = _apply_filters(Order.objects.all(), filters).order_by("-created_at", "-id")
        total = queryset.count()
        rows = queryset[filters.offset : filters.offset + filters.limit]
        return OrderPage(
            items=[OrderSnapshot.from_entity(order) for order in rows],
            total=total,
            page=filters.page,
            limit=filters.limit,
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, company_id: UUID, quotation_id: int, total_amount: Decimal) -> OrderSnapshot:
        order = Order.objects.create(
            company_id=company_id,
            quotation_id=quotation_id,
            total_amount=total_amount,
            status=OrderStatus.PENDING,
        )
        logger.info(
            "order.created",
            order_id=str(order.id),
            quotation_id=quotation_id,
            total_amount=str(total_amount),
        )
        return OrderSnapshot.from_entity(order)

    @transaction.atomic
    def apply_changes(self, id: UUID, changes: Dict[str, Any]) -> OrderSnapshot:
        updated = Order.objects.filter(id=id).update(**changes, updated_at=timezone.now())
        if not updated:
            raise Order.DoesNotExist(f"Order {id} not found.")
        logger.info("order.updated", order_id=str(id), fields=sorted(changes))
        return OrderSnapshot.from_entity(Order.objects.get(id=id))

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def status_counts(self, owner_id: Optional[UUID] = None) -> Dict[str, int]:
        queryset = Order.objects.all()
        if owner_id is not None:
            queryset = queryset.filter(company_id=owner_id)
        counts = {status.value: 0 for status in OrderStatus}
        for row in queryset.order_by().values("status").annotate(count=Count("id")):
            counts[row["status"]] = row["count"]
        return counts

    def period_totals(self, start: datetime, end: datetime) -> PeriodTotalsDTO:
        totals = Order.objects.filter(created_at__gte=start, created_at__lt=end).aggregate(
            count=Count("id"),
            amount=Sum("total_amount"),
        )
        return PeriodTotalsDTO(
            count=totals["count"] or 0,
            amount=totals["amount"] or Decimal("0.00"),
        )

    def delivered_processing_durations(self) -> List[float]:
        rows = OrderStatusHistory.objects.filter(to_status=OrderStatus.DELIVERED).values_list(
            "order__created_at", "created_at"
        )
        return [(delivered - created).total_seconds() / SECONDS_PER_DAY for created, delivered in rows]


class OrderHistoryDjangoLedger(IOrderHistoryLedger):
    """Append-only ledger; rows are inserted and read, never changed."""

    def record(
        self,
        order_id: UUID,
        from_status: Optional[str],
        to_status: str,
        changed_by: Optional[UUID],
        notes: str = "",
    ) -> StatusHistoryEntryDTO:
        entry = OrderStatusHistory.objects.create(
            order_id=order_id,
            from_status=from_status,
            to_status=to_status,
            changed_by_id=changed_by,
            notes=notes,
        )
        logger.info(
            "order.history_recorded",
            order_id=str(order_id),
            from_status=from_status,
            to_status=to_status,
        )
        return StatusHistoryEntryDTO.from_entity(entry)

    def list_by_order(self, order_id: UUID) -> List[StatusHistoryEntryDTO]:
        entries = OrderStatusHistory.objects.filter(order_id=order_id).order_by("created_at", "id")
        return [StatusHistoryEntryDTO.from_entity(entry) for entry in entries]

    def latest(self, order_id: UUID) -> Optional[StatusHistoryEntryDTO]:
        entry = (
            OrderStatusHistory.objects.filter(order_id=order_id)
            .order_by("-created_at", "-id")
            .first()
        )
        return StatusHistoryEntryDTO.from_entity(entry) if entry else None


def _first(queryset: QuerySet, id: UUID) -> Optional[Order]:
    """The row with ``id``, treating malformed ids as missing rows."""
    try:
        return queryset.filter(id=id).first()
    except (ValueError, ValidationError):
        return None


def _apply_filters(queryset: QuerySet, filters: OrderQueryFilter) -> QuerySet:
    if filters.status is not None:
        queryset = queryset.filter(status=filters.status)
    if filters.owner_id is not None:
        queryset = queryset.filter(company_id=filters.owner_id)
    if filters.date_from is not None:
        queryset = queryset.filter(created_at__gte=filters.date_from)
    if filters.date_to is not None:
        queryset = queryset.filter(created_at__lte=filters.date_to)
    return queryset
