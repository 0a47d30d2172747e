"""Quotation snapshots handed to the order lifecycle."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from modules.quotations.constants import QuotationStatus

if TYPE_CHECKING:
    from modules.quotations.models import Quotation


class QuotationSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    company_id: UUID
    status: QuotationStatus
    valid_until: Optional[datetime] = None
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.valid_until is not None and self.valid_until < now

    @classmethod
    def from_entity(cls, quotation: Quotation) -> QuotationSnapshot:
        return cls(
            id=quotation.pk,
            company_id=quotation.company_id,
            status=quotation.status,
            valid_until=quotation.valid_until,
            created_at=quotation.created_at,
        )
