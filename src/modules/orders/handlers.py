"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderCreated, OrderFiscalDataUpdated, OrderStatusChanged
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info("order.event.created", **event.to_log_context())


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info("order.event.status_changed", **event.to_log_context())


class OrderFiscalDataUpdatedHandler(IEventHandler[OrderFiscalDataUpdated]):
    def handle(self, event: OrderFiscalDataUpdated) -> None:
        logger.info("order.event.fiscal_data_updated", **event.to_log_context())


order_created_handler = OrderCreatedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_fiscal_data_updated_handler = OrderFiscalDataUpdatedHandler()
