"""Order repository interfaces.

Defines the contracts the order services depend on.  Concrete
implementations live in the infrastructure layer (``django_repository``).
Every method returns immutable DTOs, never ORM instances.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.dtos import (
        OrderDetailDTO,
        OrderPage,
        OrderQueryFilter,
        OrderSnapshot,
        PeriodTotalsDTO,
        StatusHistoryEntryDTO,
    )


class IOrderRepository(IRepository["OrderSnapshot"]):
    """Repository contract for the Order aggregate."""

    @abstractmethod
    def get_by_id(self, id: UUID) -> Optional[OrderSnapshot]:
        """Retrieve an order snapshot, or ``None`` if missing or malformed id."""

    @abstractmethod
    def get_detail(self, id: UUID) -> Optional[OrderDetailDTO]:
        """Retrieve an order with its quotation and status history."""

    @abstractmethod
    def get_for_update(self, id: UUID) -> Optional[OrderSnapshot]:
        """Retrieve an order holding a row-level lock until commit."""

    @abstractmethod
    def create(self, company_id: UUID, quotation_id: int, total_amount: Decimal) -> OrderSnapshot:
        """Insert a new ``pending`` order."""

    @abstractmethod
    def apply_changes(self, id: UUID, changes: Dict[str, Any]) -> OrderSnapshot:
        """Persist ``changes`` on the order row and return the new snapshot."""

    @abstractmethod
    def list(self, filters: OrderQueryFilter) -> OrderPage:
        """Return one page of orders matching ``filters``, newest first."""

    @abstractmethod
    def status_counts(self, owner_id: Optional[UUID] = None) -> Dict[str, int]:
        """Count orders per status, optionally for one owning company."""

    @abstractmethod
    def period_totals(self, start: datetime, end: datetime) -> PeriodTotalsDTO:
        """Count and sum orders created in ``[start, end)``."""

    @abstractmethod
    def delivered_processing_durations(self) -> List[float]:
        """Days between creation and delivery for every delivered order."""


class IOrderHistoryLedger(ABC):
    """Append-only ledger of status changes."""

    @abstractmethod
    def record(
        self,
        order_id: UUID,
        from_status: Optional[str],
        to_status: str,
        changed_by: Optional[UUID],
        notes: str = "",
    ) -> StatusHistoryEntryDTO:
        """Append an entry."""

    @abstractmethod
    def list_by_order(self, order_id: UUID) -> List[StatusHistoryEntryDTO]:
        """All entries for an order, oldest first."""

    @abstractmethod
    def latest(self, order_id: UUID) -> Optional[StatusHistoryEntryDTO]:
        """The most recent entry for an order."""
