"""Django ORM implementation of the Quotation repository."""

from __future__ import annotations

from typing import Optional

import structlog
from django.db import transaction
from django.utils import timezone

from modules.quotations.constants import QuotationStatus
from modules.quotations.dtos import QuotationSnapshot
from modules.quotations.models import Quotation
from modules.quotations.repositories.interfaces import IQuotationRepository

logger = structlog.get_logger(__name__)


class QuotationDjangoRepository(IQuotationRepository):
    def get_by_id(self, id: int) -> Optional[QuotationSnapshot]:
        quotation = Quotation.objects.filter(pk=id).first()
        return QuotationSnapshot.from_entity(quotation) if quotation else None

    def get_for_update(self, id: int) -> Optional[QuotationSnapshot]:
        """Lock the quotation row (``SELECT ... FOR UPDATE``).

        Must run inside ``transaction.atomic``; concurrent conversions of the
        same quotation are serialised here.
        """
        quotation = Quotation.objects.select_for_update().filter(pk=id).first()
        return QuotationSnapshot.from_entity(quotation) if quotation else None

    @transaction.atomic
    def mark_completed(self, id: int) -> QuotationSnapshot:
        updated = Quotation.objects.filter(pk=id).update(
            status=QuotationStatus.COMPLETED,
            updated_at=timezone.now(),
        )
        if not updated:
            raise Quotation.DoesNotExist(f"Quotation {id} not found.")
        logger.info("quotation.completed", quotation_id=id)
        return QuotationSnapshot.from_entity(Quotation.objects.get(pk=id))
