"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple
from uuid import UUID

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when a quotation is converted into an order."""

    quotation_id: int = 0
    company_id: Optional[UUID] = None


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised after a status transition is committed."""

    from_status: str = ""
    to_status: str = ""
    changed_by: Optional[UUID] = None


@dataclass(frozen=True)
class OrderFiscalDataUpdated(DomainEvent):
    """Raised after NF-e fields are set or corrected outside a transition."""

    fields: Tuple[str, ...] = ()
    changed_by: Optional[UUID] = None
