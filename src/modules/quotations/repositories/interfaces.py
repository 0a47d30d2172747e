"""Quotation repository interface.

The order lifecycle only needs to read a quotation under lock and to mark
it completed once converted.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.quotations.dtos import QuotationSnapshot


class IQuotationRepository(IRepository["QuotationSnapshot"]):
    @abstractmethod
    def get_by_id(self, id: int) -> Optional[QuotationSnapshot]:
        """Retrieve a quotation snapshot."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[QuotationSnapshot]:
        """Retrieve a quotation holding a row-level lock until commit."""

    @abstractmethod
    def mark_completed(self, id: int) -> QuotationSnapshot:
        """Flip the quotation to ``completed``."""
