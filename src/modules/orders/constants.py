"""Order domain constants.

Defines status choices, the transition graph of the order state machine and
the human-readable description of every status.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pendente"
    PROCESSING = "processing", "Em processamento"
    SHIPPED = "shipped", "Enviado"
    DELIVERED = "delivered", "Entregue"
    CANCELLED = "cancelled", "Cancelado"


# Cancellation is not possible once the goods have left the supplier.
VALID_TRANSITIONS: dict[str, frozenset[str]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Tracking number and estimated delivery may only be set when entering these.
SHIPPING_DETAIL_STATES: frozenset[str] = frozenset(
    {OrderStatus.PROCESSING, OrderStatus.SHIPPED}
)

# Fields that must be present on the order (supplied now or stored earlier)
# for a given transition to be accepted.
REQUIRED_FIELDS_BY_TRANSITION: dict[tuple[str, str], tuple[str, ...]] = {
    (OrderStatus.PROCESSING, OrderStatus.SHIPPED): ("tracking_number", "nfe_access_key"),
}

STATUS_DESCRIPTIONS: dict[str, str] = {
    OrderStatus.PENDING: "Order placed, awaiting processing",
    OrderStatus.PROCESSING: "Order is being prepared",
    OrderStatus.SHIPPED: "Order has been shipped",
    OrderStatus.DELIVERED: "Order has been delivered",
    OrderStatus.CANCELLED: "Order has been cancelled",
}

DELIVERY_DAYS_BY_METHOD: dict[str, int] = {
    "express": 2,
    "standard": 5,
    "economy": 10,
}

NFE_ACCESS_KEY_LENGTH = 44
