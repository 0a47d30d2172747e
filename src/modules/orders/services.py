"""Order lifecycle service (Use Cases).

Orchestrates every write on an order: conversion of a quotation into an
order, status transitions and NF-e field updates.  All commands are atomic;
the service defines the unit-of-work boundary and locks the rows it
re-validates (``SELECT ... FOR UPDATE``) so read, validate and write happen
as a single step.

Business rules enforced:
- Only ``processed``, unexpired quotations owned by the requester convert.
- One order per quotation; the quotation is marked ``completed``.
- Status transitions follow ``TransitionPolicy``.
- Every status change appends exactly one ledger entry.
- NF-e fields are validated (44 digits + Modulo 11, URL syntax).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from pydantic.alias_generators import to_camel

from modules.companies.constants import FULFILLMENT_ROLES
from modules.orders.constants import (
    REQUIRED_FIELDS_BY_TRANSITION,
    SHIPPING_DETAIL_STATES,
    OrderStatus,
)
from modules.orders.delivery import estimate_delivery_date
from modules.orders.events import OrderCreated, OrderFiscalDataUpdated, OrderStatusChanged
from modules.orders.exceptions import (
    InvalidFiscalData,
    OrderAccessDenied,
    OrderNotFound,
    OrderStateConflict,
)
from modules.orders.fiscal import fiscal_field_errors
from modules.orders.policies import TransitionPolicy
from modules.quotations.constants import QuotationStatus
from modules.quotations.exceptions import (
    QuotationExpired,
    QuotationNotFound,
    QuotationNotProcessed,
)
from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from modules.orders.dtos import (
        FiscalFieldsDTO,
        OrderDetailDTO,
        OrderSnapshot,
        StatusUpdateDTO,
    )
    from modules.orders.repositories.interfaces import IOrderHistoryLedger, IOrderRepository
    from modules.quotations.pricing import IPricingService
    from modules.quotations.repositories.interfaces import IQuotationRepository
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


class OrderLifecycleService:
    """Application service for order commands.

    Receives repositories and collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        history_ledger: IOrderHistoryLedger,
        quotation_repository: IQuotationRepository,
        pricing_service: IPricingService,
        policy: Optional[TransitionPolicy] = None,
        bus: Optional[IEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._ledger = history_ledger
        self._quotation_repo = quotation_repository
        self._pricing = pricing_service
        self._policy = policy or TransitionPolicy()
        self._bus = bus or event_bus

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_from_quotation(self, quotation_id: int, requester_id: UUID) -> OrderDetailDTO:
        """Convert a processed quotation into a ``pending`` order.

        Steps:
        1. Lock the quotation row and check ownership, status and validity.
        2. Ask the pricing collaborator for the grand total.
        3. Insert the order and its first ledger entry (``None -> pending``).
        4. Mark the quotation ``completed``.

        Raises:
            QuotationNotFound: missing, or owned by another company.
            QuotationNotProcessed: status is not ``processed``.
            QuotationExpired: ``valid_until`` is in the past.
        """
        log = logger.bind(quotation_id=quotation_id, requester_id=str(requester_id))
        log.info("order.creation_started")

        quotation = self._quotation_repo.get_for_update(quotation_id)
        if quotation is None or quotation.company_id != requester_id:
            raise QuotationNotFound(
                f"Quotation {quotation_id} not found.",
                quotation_id=quotation_id,
            )
        if quotation.status != QuotationStatus.PROCESSED:
            raise QuotationNotProcessed(
                f"Quotation {quotation_id} must be processed to create an order "
                f"(current status: {quotation.status.value}).",
                quotation_id=quotation_id,
                status=quotation.status.value,
            )
        if quotation.is_expired(timezone.now()):
            raise QuotationExpired(
                f"Quotation {quotation_id} expired on {quotation.valid_until.isoformat()}.",
                quotation_id=quotation_id,
            )

        total = self._pricing.grand_total(quotation_id)
        order = self._order_repo.create(
            company_id=requester_id,
            quotation_id=quotation_id,
            total_amount=total,
        )
        self._ledger.record(
            order_id=order.id,
            from_status=None,
            to_status=OrderStatus.PENDING,
            changed_by=requester_id,
            notes=f"Order created from quotation {quotation_id}.",
        )
        self._quotation_repo.mark_completed(quotation_id)

        self._bus.publish_on_commit(
            OrderCreated(aggregate_id=order.id, quotation_id=quotation_id, company_id=requester_id)
        )
        log.info("order.creation_completed", order_id=str(order.id), total_amount=str(total))
        return self._order_repo.get_detail(order.id)

    @transaction.atomic
    def update_status(
        self,
        order_id: UUID,
        dto: StatusUpdateDTO,
        role: str,
        requester_id: UUID,
    ) -> OrderSnapshot:
        """Move the order to ``dto.status`` and append a ledger entry.

        Raises:
            OrderNotFound: order does not exist.
            OrderAccessDenied: requester role cannot transition orders.
            InvalidTransition: ``dto.status`` is not reachable.
            InvalidFiscalData: a supplied NF-e field is malformed.
            OrderStateConflict: shipping details on the wrong status, NF-e
                fields on a cancellation, or fields required by the
                transition are missing.
        """
        log = logger.bind(order_id=str(order_id), requested_status=str(dto.status))

        if role not in FULFILLMENT_ROLES:
            log.warning("order.invalid_transition", role=role)
            raise OrderAccessDenied(
                "Only admins and suppliers can update order status.",
                role=str(role),
            )

        order = self._order_repo.get_for_update(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.", order_id=str(order_id))

        decision = self._policy.can_transition(order.status, dto.status, role)
        if not decision.allowed:
            log.warning("order.invalid_transition", current_status=order.status.value, role=role)
        decision.raise_if_denied()
        _raise_for_fiscal_errors(dto.fiscal_fields)

        if dto.status not in SHIPPING_DETAIL_STATES and (
            dto.tracking_number is not None or dto.estimated_delivery_date is not None
        ):
            raise OrderStateConflict(
                "Tracking number and estimated delivery date can only be set "
                "when moving an order to processing or shipped.",
                status=dto.status.value,
            )

        if dto.status == OrderStatus.CANCELLED and not dto.fiscal_fields.is_empty:
            raise OrderStateConflict(
                "Fiscal data cannot be changed on a cancelled order.",
                status=dto.status.value,
            )

        changes: Dict[str, Any] = {"status": dto.status}
        if dto.tracking_number is not None:
            changes["tracking_number"] = dto.tracking_number
        if dto.estimated_delivery_date is not None:
            changes["estimated_delivery_date"] = dto.estimated_delivery_date
        changes.update(dto.fiscal_fields.changes())

        required = REQUIRED_FIELDS_BY_TRANSITION.get((order.status, dto.status), ())
        missing = [name for name in required if not (changes.get(name) or getattr(order, name))]
        if missing:
            raise OrderStateConflict(
                f"Cannot move order from {order.status.value} to {dto.status.value}: "
                f"missing {', '.join(to_camel(name) for name in missing)}.",
                fields={to_camel(name): "This field is required." for name in missing},
            )

        if dto.status == OrderStatus.SHIPPED and not (
            changes.get("estimated_delivery_date") or order.estimated_delivery_date
        ):
            changes["estimated_delivery_date"] = estimate_delivery_date(
                timezone.localdate(),
                lead_days=getattr(settings, "ORDERS_STANDARD_DELIVERY_DAYS", None),
            )

        updated = self._order_repo.apply_changes(order.id, changes)
        self._ledger.record(
            order_id=order.id,
            from_status=order.status,
            to_status=dto.status,
            changed_by=requester_id,
            notes=dto.notes,
        )

        self._bus.publish_on_commit(
            OrderStatusChanged(
                aggregate_id=order.id,
                from_status=order.status.value,
                to_status=dto.status.value,
                changed_by=requester_id,
            )
        )
        log.info("order.status_changed", from_status=order.status.value)
        return updated

    @transaction.atomic
    def update_fiscal_fields(
        self,
        order_id: UUID,
        dto: FiscalFieldsDTO,
        requester_id: UUID,
        role: str,
    ) -> OrderSnapshot:
        """Set or correct the NF-e access key and/or URL.

        No status change, hence no ledger entry.

        Raises:
            OrderAccessDenied: requester role cannot touch fiscal data.
            OrderNotFound: order does not exist.
            InvalidFiscalData: no field supplied, or a field is malformed.
            OrderStateConflict: the order is cancelled.
        """
        if role not in FULFILLMENT_ROLES:
            raise OrderAccessDenied(
                "Only admins and suppliers can update fiscal data.",
                role=str(role),
            )

        order = self._order_repo.get_for_update(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.", order_id=str(order_id))

        if dto.is_empty:
            raise InvalidFiscalData("Provide nfeAccessKey and/or nfeUrl.")
        _raise_for_fiscal_errors(dto)

        if order.status == OrderStatus.CANCELLED:
            raise OrderStateConflict(
                "Fiscal data cannot be changed on a cancelled order.",
                order_id=str(order_id),
            )

        changes = dto.changes()
        updated = self._order_repo.apply_changes(order.id, changes)
        self._bus.publish_on_commit(
            OrderFiscalDataUpdated(
                aggregate_id=order.id,
                fields=tuple(sorted(changes)),
                changed_by=requester_id,
            )
        )
        logger.info("order.fiscal_data_updated", order_id=str(order_id), fields=sorted(changes))
        return updated


def _raise_for_fiscal_errors(dto: FiscalFieldsDTO) -> None:
    errors = fiscal_field_errors(nfe_access_key=dto.nfe_access_key, nfe_url=dto.nfe_url)
    if errors:
        raise InvalidFiscalData("Invalid fiscal data.", fields=errors)
