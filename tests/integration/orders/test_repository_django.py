"""Integration tests for OrderDjangoRepository."""

from __future__ import annotations

from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from freezegun import freeze_time
from pydantic import ValidationError

from modules.orders.constants import OrderStatus
from modules.orders.dtos import OrderQueryFilter, StatusUpdateDTO
from modules.orders.models import Order
from modules.orders.repositories import OrderDjangoRepository

pytestmark = pytest.mark.integration


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


class TestReads:
    def test_get_by_id_returns_frozen_snapshot(self, repo, make_order, customer):
        order = make_order(customer)

        snapshot = repo.get_by_id(order.id)

        assert snapshot.id == order.id
        with pytest.raises(ValidationError):
            snapshot.status = OrderStatus.CANCELLED

    @pytest.mark.parametrize("bad_id", ["not-a-uuid", "123"])
    def test_malformed_id_returns_none(self, repo, bad_id):
        assert repo.get_by_id(bad_id) is None
        assert repo.get_detail(bad_id) is None

    def test_unknown_id_returns_none(self, repo):
        assert repo.get_by_id(uuid4()) is None

    def test_detail_includes_quotation_and_history(self, repo, make_order, customer):
        order = make_order(customer, path=["processing"])

        detail = repo.get_detail(order.id)

        assert detail.quotation.id == order.quotation_id
        assert detail.quotation.status == "completed"
        assert [entry.to_status for entry in detail.history] == ["pending", "processing"]


class TestList:
    def test_filters_by_status_and_owner(self, repo, make_order, customer, other_customer):
        make_order(customer)
        shipped = make_order(customer, path=["processing", "shipped"])
        make_order(other_customer, path=["processing", "shipped"])

        page = repo.list(OrderQueryFilter(status="shipped", owner_id=customer.id))

        assert page.total == 1
        assert [order.id for order in page.items] == [shipped.id]

    def test_pages_newest_first(self, repo, make_order, customer):
        created = []
        for day in range(1, 6):
            with freeze_time(f"2024-03-0{day} 12:00:00"):
                created.append(make_order(customer))

        page = repo.list(OrderQueryFilter(owner_id=customer.id, page=2, limit=2))

        assert page.total == 5
        assert page.total_pages == 3
        assert [order.id for order in page.items] == [created[2].id, created[1].id]

    def test_date_range_is_inclusive(self, repo, make_order, customer):
        with freeze_time("2024-03-01 12:00:00"):
            make_order(customer)
        with freeze_time("2024-03-10 12:00:00"):
            inside = make_order(customer)
        with freeze_time("2024-03-20 12:00:00"):
            make_order(customer)

        page = repo.list(
            OrderQueryFilter(
                date_from=datetime(2024, 3, 10, 12, 0, tzinfo=dt_timezone.utc),
                date_to=datetime(2024, 3, 15, tzinfo=dt_timezone.utc),
            )
        )

        assert [order.id for order in page.items] == [inside.id]


class TestAggregates:
    def test_status_counts_are_zero_filled(self, repo, make_order, customer, other_customer):
        make_order(customer)
        make_order(customer, path=["cancelled"])
        make_order(other_customer)

        assert repo.status_counts(customer.id) == {
            "pending": 1,
            "processing": 0,
            "shipped": 0,
            "delivered": 0,
            "cancelled": 1,
        }
        assert repo.status_counts()["pending"] == 2

    def test_period_totals(self, repo, make_order, customer):
        with freeze_time("2024-02-10 12:00:00"):
            make_order(customer)
        with freeze_time("2024-03-10 12:00:00"):
            make_order(customer)
            make_order(customer)

        totals = repo.period_totals(
            datetime(2024, 3, 1, tzinfo=dt_timezone.utc),
            datetime(2024, 4, 1, tzinfo=dt_timezone.utc),
        )

        assert totals.count == 2
        assert totals.amount == Decimal("501.00")

    def test_empty_period(self, repo):
        start = datetime(2024, 3, 1, tzinfo=dt_timezone.utc)
        totals = repo.period_totals(start, start + timedelta(days=31))
        assert (totals.count, totals.amount) == (0, Decimal("0.00"))

    def test_delivered_processing_durations(self, repo, make_order, customer, lifecycle_service, supplier):
        with freeze_time("2024-03-01 12:00:00"):
            order = make_order(customer, path=["processing", "shipped"])
        with freeze_time("2024-03-04 00:00:00"):
            lifecycle_service.update_status(
                order.id, StatusUpdateDTO(status="delivered"), supplier.role, supplier.id
            )

        assert repo.delivered_processing_durations() == [2.5]

    def test_apply_changes_on_missing_order_raises(self, repo):
        with pytest.raises(Order.DoesNotExist):
            repo.apply_changes(uuid4(), {"status": OrderStatus.CANCELLED})
