"""Integration tests for the read endpoints of /api/v1/orders/."""

from __future__ import annotations

import pytest
from freezegun import freeze_time

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


class TestListOwnOrders:
    def test_customer_sees_only_own_orders(self, client_for, customer, other_customer, make_order):
        mine = make_order(customer)
        make_order(other_customer)

        response = client_for(customer).get(URL)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert [order["id"] for order in data["results"]] == [str(mine.id)]

    def test_status_filter(self, client_for, customer, make_order):
        make_order(customer)
        cancelled = make_order(customer, path=["cancelled"])

        response = client_for(customer).get(URL, {"status": "cancelled"})

        assert [order["id"] for order in response.json()["results"]] == [str(cancelled.id)]

    def test_supplier_listing_is_scoped_to_supplier(self, client_for, supplier, customer, make_order):
        make_order(customer)

        response = client_for(supplier).get(URL)

        assert response.json()["count"] == 0

    def test_pagination_envelope(self, client_for, customer, make_order):
        for day in range(1, 4):
            with freeze_time(f"2024-03-0{day} 12:00:00"):
                make_order(customer)

        response = client_for(customer).get(URL, {"page": 2, "limit": 2})

        data = response.json()
        assert (data["count"], data["page"], data["limit"], data["totalPages"]) == (3, 2, 2, 2)
        assert len(data["results"]) == 1

    @pytest.mark.parametrize("params", [{"status": "lost"}, {"page": 0}, {"limit": "x"}])
    def test_invalid_query(self, client_for, customer, params):
        response = client_for(customer).get(URL, params)
        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "format_error"


class TestRetrieve:
    def test_owner_reads_order_with_associations(self, client_for, customer, make_order):
        order = make_order(customer, path=["processing"])

        response = client_for(customer).get(f"{URL}{order.id}/")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(order.id)
        assert data["quotation"]["id"] == order.quotation_id
        assert [entry["toStatus"] for entry in data["history"]] == ["pending", "processing"]

    def test_other_customer_gets_404(self, client_for, customer, other_customer, make_order):
        order = make_order(customer)

        response = client_for(other_customer).get(f"{URL}{order.id}/")

        assert response.status_code == 404

    def test_supplier_reads_any_order(self, client_for, supplier, customer, make_order):
        order = make_order(customer)
        assert client_for(supplier).get(f"{URL}{order.id}/").status_code == 200


class TestHistory:
    def test_timeline(self, client_for, customer, make_order):
        order = make_order(customer, path=["processing", "shipped"])

        response = client_for(customer).get(f"{URL}{order.id}/history/")

        assert response.status_code == 200
        data = response.json()
        assert data["order"]["id"] == str(order.id)
        assert [step["status"] for step in data["timeline"]] == ["pending", "processing", "shipped"]
        shipped = data["timeline"][-1]
        assert shipped["description"] == "Order has been shipped"
        assert shipped["canTransitionTo"] == ["delivered"]
        assert "reachedAt" in shipped
        assert len(data["entries"]) == 3

    def test_other_customer_is_forbidden(self, client_for, customer, other_customer, make_order):
        order = make_order(customer)

        response = client_for(other_customer).get(f"{URL}{order.id}/history/")

        assert response.status_code == 403
        assert response.json()["errors"][0]["code"] == "authorization_error"

    def test_admin_reads_any_history(self, client_for, admin_company, customer, make_order):
        order = make_order(customer)
        assert client_for(admin_company).get(f"{URL}{order.id}/history/").status_code == 200
