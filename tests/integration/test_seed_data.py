import pytest
from django.core.management import call_command

from modules.companies.models import Company
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderStatusHistory

pytestmark = pytest.mark.integration


def test_seed_data_builds_consistent_lifecycle():
    call_command("seed_data")

    assert Company.objects.count() == 4
    assert Order.objects.count() == 8
    assert set(Order.objects.values_list("status", flat=True)) == {
        OrderStatus.PENDING,
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }
    for order in Order.objects.all():
        latest = OrderStatusHistory.objects.filter(order=order).last()
        assert latest.to_status == order.status


def test_seed_data_is_rerunnable_for_companies():
    call_command("seed_data")
    call_command("seed_data")

    assert Company.objects.count() == 4
