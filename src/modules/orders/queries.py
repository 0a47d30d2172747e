"""Read side of the Orders context.

Queries never lock or mutate.  Visibility rules:
- customers and suppliers list only their own company's orders;
- customers read a single order or its history only when they own it;
- the cross-company listing and the statistics are admin only.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from statistics import mean
from typing import TYPE_CHECKING, Dict, Optional, Union
from uuid import UUID

import structlog
from django.utils import timezone

from modules.orders.constants import STATUS_DESCRIPTIONS
from modules.orders.dtos import OrderHistoryDTO, OrderStatsDTO, TimelineStepDTO
from modules.orders.exceptions import OrderAccessDenied, OrderNotFound
from modules.orders.policies import allowed_next_statuses

if TYPE_CHECKING:
    from modules.companies.dtos import Requester
    from modules.orders.dtos import OrderDetailDTO, OrderPage, OrderQueryFilter
    from modules.orders.repositories.interfaces import IOrderHistoryLedger, IOrderRepository

logger = structlog.get_logger(__name__)


class OrderQueryService:
    def __init__(
        self,
        order_repository: IOrderRepository,
        history_ledger: IOrderHistoryLedger,
    ) -> None:
        self._order_repo = order_repository
        self._ledger = history_ledger

    def list_orders(self, requester: Requester, filters: OrderQueryFilter) -> OrderPage:
        """The requester's own orders, whatever ``owner_id`` was asked for."""
        scoped = filters.model_copy(update={"owner_id": requester.company_id})
        return self._order_repo.list(scoped)

    def list_all_orders(self, requester: Requester, filters: OrderQueryFilter) -> OrderPage:
        _require_admin(requester)
        return self._order_repo.list(filters)

    def get_order(self, order_id: UUID, requester: Requester) -> OrderDetailDTO:
        order = self._order_repo.get_detail(order_id)
        if order is None or not _can_read(order.company_id, requester):
            raise OrderNotFound(f"Order {order_id} not found.", order_id=str(order_id))
        return order

    def get_history(self, order_id: UUID, requester: Requester) -> OrderHistoryDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.", order_id=str(order_id))
        if not _can_read(order.company_id, requester):
            raise OrderAccessDenied(
                "You can only view the history of your own orders.",
                order_id=str(order_id),
            )

        entries = self._ledger.list_by_order(order_id)
        timeline = [
            TimelineStepDTO(
                status=entry.to_status,
                description=STATUS_DESCRIPTIONS[entry.to_status],
                reached_at=entry.created_at,
                can_transition_to=sorted(allowed_next_statuses(entry.to_status)),
            )
            for entry in entries
        ]
        return OrderHistoryDTO(order=order, entries=entries, timeline=timeline)

    def status_counts(self, owner_id: Optional[UUID] = None) -> Dict[str, int]:
        return self._order_repo.status_counts(owner_id)

    def get_stats(self, requester: Requester, now: Optional[datetime] = None) -> OrderStatsDTO:
        """Admin dashboard figures.

        Month windows are calendar months in the active time zone; growth
        rates are percentages rounded to two decimals.
        """
        _require_admin(requester)

        now = timezone.localtime(now or timezone.now())
        this_month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        next_month_start = (this_month_start + timedelta(days=32)).replace(day=1)
        last_month_start = (this_month_start - timedelta(days=1)).replace(day=1)

        counts = self.status_counts()
        this_month = self._order_repo.period_totals(this_month_start, next_month_start)
        last_month = self._order_repo.period_totals(last_month_start, this_month_start)
        durations = self._order_repo.delivered_processing_durations()

        stats = OrderStatsDTO(
            status_counts=counts,
            total_orders=sum(counts.values()),
            average_processing_days=round(mean(durations), 2) if durations else 0.0,
            this_month=this_month,
            last_month=last_month,
            order_growth_rate=growth_rate(this_month.count, last_month.count),
            revenue_growth_rate=growth_rate(this_month.amount, last_month.amount),
        )
        logger.info("order.stats_computed", total_orders=stats.total_orders)
        return stats


def growth_rate(current: Union[Decimal, int], previous: Union[Decimal, int]) -> float:
    """Percentage change; 100 when growing from zero, 0 when both are zero."""
    if previous:
        return round(float((current - previous) / previous * 100), 2)
    return 100.0 if current > 0 else 0.0


def _can_read(owner_id: UUID, requester: Requester) -> bool:
    return requester.can_fulfill or owner_id == requester.company_id


def _require_admin(requester: Requester) -> None:
    if not requester.is_admin:
        raise OrderAccessDenied("Admin access required.", role=requester.role.value)
