"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  Repositories
return the frozen snapshots below instead of ORM instances, so no caller can
mutate an order by assigning attributes; every change goes through
``OrderLifecycleService``, which hands back a fresh snapshot.

Output DTOs serialise with camelCase aliases (``model_dump(by_alias=True)``)
because that is the public JSON contract.

- ``CreateOrderDTO``: input for quotation conversion.
- ``StatusUpdateDTO``: input for a status transition (+ optional fields).
- ``FiscalFieldsDTO``: input for NF-e field updates.
- ``OrderQueryFilter``: the explicit set of supported list filters.
- ``OrderSnapshot`` / ``OrderDetailDTO``: order output.
- ``StatusHistoryEntryDTO`` / ``OrderHistoryDTO``: ledger output.
- ``OrderPage`` / ``OrderStatsDTO``: read-side aggregates.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from modules.orders.constants import OrderStatus

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class _OutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    quotation_id: int = Field(ge=1)


class FiscalFieldsDTO(BaseModel):
    """NF-e fields; ``None`` means "leave unchanged"."""

    model_config = ConfigDict(frozen=True)

    nfe_access_key: Optional[str] = None
    nfe_url: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.nfe_access_key is None and self.nfe_url is None

    def changes(self) -> Dict[str, str]:
        return self.model_dump(exclude_none=True)


class StatusUpdateDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    tracking_number: Optional[str] = None
    estimated_delivery_date: Optional[date] = None
    notes: str = ""
    nfe_access_key: Optional[str] = None
    nfe_url: Optional[str] = None

    @field_validator("tracking_number")
    @classmethod
    def blank_tracking_number_is_absent(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v.strip() if v is not None else v

    @property
    def fiscal_fields(self) -> FiscalFieldsDTO:
        return FiscalFieldsDTO(nfe_access_key=self.nfe_access_key, nfe_url=self.nfe_url)


class OrderQueryFilter(BaseModel):
    """Explicit list filters; anything not declared here is not filterable."""

    model_config = ConfigDict(frozen=True)

    status: Optional[OrderStatus] = None
    owner_id: Optional[UUID] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)

    @model_validator(mode="after")
    def date_range_is_ordered(self) -> OrderQueryFilter:
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to.")
        return self

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class StatusHistoryEntryDTO(_OutputDTO):
    id: UUID
    order_id: UUID
    from_status: Optional[OrderStatus]
    to_status: OrderStatus
    changed_by: Optional[UUID]
    notes: str
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: OrderStatusHistory) -> StatusHistoryEntryDTO:
        return cls(
            id=entry.id,
            order_id=entry.order_id,
            from_status=entry.from_status,
            to_status=entry.to_status,
            changed_by=entry.changed_by_id,
            notes=entry.notes,
            created_at=entry.created_at,
        )


class OrderSnapshot(_OutputDTO):
    id: UUID
    status: OrderStatus
    company_id: UUID
    quotation_id: int
    total_amount: Decimal
    estimated_delivery_date: Optional[date] = None
    tracking_number: Optional[str] = None
    nfe_access_key: Optional[str] = None
    nfe_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderSnapshot:
        return cls(**_order_fields(order))


class QuotationSummaryDTO(_OutputDTO):
    id: int
    status: str
    valid_until: Optional[datetime] = None


class OrderDetailDTO(OrderSnapshot):
    """Order with its associations: source quotation and status history.

    Assumes ``quotation`` is select-related and ``status_history`` prefetched.
    """

    quotation: QuotationSummaryDTO
    history: List[StatusHistoryEntryDTO]

    @classmethod
    def from_entity(cls, order: Order) -> OrderDetailDTO:
        quotation = order.quotation
        return cls(
            **_order_fields(order),
            quotation=QuotationSummaryDTO(
                id=quotation.pk,
                status=quotation.status,
                valid_until=quotation.valid_until,
            ),
            history=[
                StatusHistoryEntryDTO.from_entity(entry)
                for entry in order.status_history.all()
            ],
        )


def _order_fields(order: Order) -> Dict[str, Any]:
    return {
        "id": order.id,
        "status": order.status,
        "company_id": order.company_id,
        "quotation_id": order.quotation_id,
        "total_amount": order.total_amount,
        "estimated_delivery_date": order.estimated_delivery_date,
        "tracking_number": order.tracking_number,
        "nfe_access_key": order.nfe_access_key,
        "nfe_url": order.nfe_url,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


class TimelineStepDTO(_OutputDTO):
    status: OrderStatus
    description: str
    reached_at: datetime
    can_transition_to: List[OrderStatus]


class OrderHistoryDTO(_OutputDTO):
    order: OrderSnapshot
    entries: List[StatusHistoryEntryDTO]
    timeline: List[TimelineStepDTO]


class OrderPage(_OutputDTO):
    items: List[OrderSnapshot]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class PeriodTotalsDTO(_OutputDTO):
    count: int
    amount: Decimal


class OrderStatsDTO(_OutputDTO):
    status_counts: Dict[str, int]
    total_orders: int
    average_processing_days: float
    this_month: PeriodTotalsDTO
    last_month: PeriodTotalsDTO
    order_growth_rate: float
    revenue_growth_rate: float
