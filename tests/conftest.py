from __future__ import annotations

import itertools
from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from modules.companies.constants import CompanyRole
from modules.companies.models import Company
from modules.orders.dtos import StatusUpdateDTO
from modules.orders.queries import OrderQueryService
from modules.orders.repositories import OrderDjangoRepository, OrderHistoryDjangoLedger
from modules.orders.services import OrderLifecycleService
from modules.quotations.constants import QuotationStatus
from modules.quotations.models import Quotation, QuotationItem
from modules.quotations.pricing import QuotationItemsPricingService
from modules.quotations.repositories import QuotationDjangoRepository

User = get_user_model()

FIXTURE_NFE_ACCESS_KEY = "35240312345678000195550010000014761000047680"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_company():
    """Factory creating a user plus its company profile."""
    counter = itertools.count(1)

    def _make(role=CompanyRole.CUSTOMER, **kwargs) -> Company:
        n = next(counter)
        user = User.objects.create_user(username=f"{role}-{n}", password="testpass123")
        return Company.objects.create(
            user=user,
            name=kwargs.pop("name", f"Company {role} {n}"),
            cnpj=kwargs.pop("cnpj", f"{n:014d}"),
            role=role,
            **kwargs,
        )

    return _make


@pytest.fixture()
def customer(make_company):
    return make_company(CompanyRole.CUSTOMER)


@pytest.fixture()
def other_customer(make_company):
    return make_company(CompanyRole.CUSTOMER)


@pytest.fixture()
def supplier(make_company):
    return make_company(CompanyRole.SUPPLIER)


@pytest.fixture()
def admin_company(make_company):
    return make_company(CompanyRole.ADMIN)


@pytest.fixture()
def client_for():
    """APIClient force-authenticated as the given company's user."""

    def _client(company: Company) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=company.user)
        return client

    return _client


# ---------------------------------------------------------------------------
# Quotations and orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_quotation():
    """Factory for quotations; default items total 250.50."""

    def _make(
        company: Company,
        status: str = QuotationStatus.PROCESSED,
        valid_until=None,
        items=((2, "100.00"), (1, "50.50")),
    ) -> Quotation:
        if valid_until is None:
            valid_until = timezone.now() + timedelta(days=7)
        quotation = Quotation.objects.create(
            company=company,
            status=status,
            valid_until=valid_until,
        )
        for quantity, unit_price in items:
            QuotationItem.objects.create(
                quotation=quotation,
                description=f"Item x{quantity}",
                quantity=quantity,
                unit_price=Decimal(unit_price),
            )
        return quotation

    return _make


@pytest.fixture()
def lifecycle_service():
    return OrderLifecycleService(
        order_repository=OrderDjangoRepository(),
        history_ledger=OrderHistoryDjangoLedger(),
        quotation_repository=QuotationDjangoRepository(),
        pricing_service=QuotationItemsPricingService(),
    )


@pytest.fixture()
def query_service():
    return OrderQueryService(
        order_repository=OrderDjangoRepository(),
        history_ledger=OrderHistoryDjangoLedger(),
    )


@pytest.fixture()
def make_order(make_quotation, lifecycle_service, supplier):
    """Create an order for ``company`` and walk it through ``path``.

    Moving to ``shipped`` supplies a tracking number and the fixture NF-e key.
    """

    def _make(company: Company, path=()):
        quotation = make_quotation(company)
        order = lifecycle_service.create_from_quotation(quotation.pk, company.id)
        for target in path:
            extra = {}
            if target == "shipped":
                extra = {
                    "tracking_number": "BR123456789",
                    "nfe_access_key": FIXTURE_NFE_ACCESS_KEY,
                }
            order = lifecycle_service.update_status(
                order_id=order.id,
                dto=StatusUpdateDTO(status=target, **extra),
                role=supplier.role,
                requester_id=supplier.id,
            )
        return order

    return _make
