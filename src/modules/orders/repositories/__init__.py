"""Order repositories package."""

from modules.orders.repositories.django_repository import (
    OrderDjangoRepository,
    OrderHistoryDjangoLedger,
)
from modules.orders.repositories.interfaces import IOrderHistoryLedger, IOrderRepository

__all__ = [
    "IOrderHistoryLedger",
    "IOrderRepository",
    "OrderDjangoRepository",
    "OrderHistoryDjangoLedger",
]
