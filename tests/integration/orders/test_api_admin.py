"""Integration tests for the admin-only order endpoints."""

from __future__ import annotations

import pytest
from freezegun import freeze_time

pytestmark = pytest.mark.integration

ALL_URL = "/api/v1/orders/admin/all/"
STATS_URL = "/api/v1/orders/admin/stats/"


class TestAdminAll:
    def test_lists_every_company(self, client_for, admin_company, customer, other_customer, make_order):
        make_order(customer)
        make_order(other_customer)

        response = client_for(admin_company).get(ALL_URL)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert data["limit"] == 50

    def test_date_and_status_filters(self, client_for, admin_company, customer, make_order):
        with freeze_time("2024-03-01 12:00:00"):
            make_order(customer)
        with freeze_time("2024-03-10 12:00:00"):
            inside = make_order(customer, path=["processing"])
            make_order(customer)

        response = client_for(admin_company).get(
            ALL_URL,
            {"status": "processing", "startDate": "2024-03-05", "endDate": "2024-03-10"},
        )

        assert [order["id"] for order in response.json()["results"]] == [str(inside.id)]

    def test_reversed_date_range(self, client_for, admin_company):
        response = client_for(admin_company).get(
            ALL_URL, {"startDate": "2024-03-10", "endDate": "2024-03-01"}
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "endDate"

    def test_limit_is_capped(self, client_for, admin_company, settings):
        settings.ORDERS_MAX_PAGE_SIZE = 10
        response = client_for(admin_company).get(ALL_URL, {"limit": 500})
        assert response.json()["limit"] == 10

    @pytest.mark.parametrize("role_fixture", ["customer", "supplier"])
    def test_non_admin_is_forbidden(self, request, client_for, role_fixture):
        company = request.getfixturevalue(role_fixture)
        assert client_for(company).get(ALL_URL).status_code == 403
        assert client_for(company).get(STATS_URL).status_code == 403


class TestAdminStats:
    def test_stats(self, client_for, admin_company, customer, supplier, make_order):
        with freeze_time("2024-02-10 12:00:00"):
            make_order(customer)
        with freeze_time("2024-03-01 12:00:00"):
            make_order(customer, path=["processing", "shipped"])
        with freeze_time("2024-03-03 12:00:00"):
            make_order(customer, path=["cancelled"])

        with freeze_time("2024-03-15 12:00:00"):
            response = client_for(admin_company).get(STATS_URL)

        assert response.status_code == 200
        data = response.json()
        assert data["totalOrders"] == 3
        assert data["statusCounts"] == {
            "pending": 1,
            "processing": 0,
            "shipped": 1,
            "delivered": 0,
            "cancelled": 1,
        }
        assert data["thisMonth"]["count"] == 2
        assert data["lastMonth"]["count"] == 1
        assert data["orderGrowthRate"] == 100.0
        assert data["averageProcessingDays"] == 0.0
