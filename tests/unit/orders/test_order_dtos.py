"""Unit tests for order DTOs."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.orders.constants import OrderStatus
from modules.orders.dtos import (
    CreateOrderDTO,
    FiscalFieldsDTO,
    OrderPage,
    OrderQueryFilter,
    OrderSnapshot,
    StatusUpdateDTO,
)

pytestmark = pytest.mark.unit

NOW = datetime(2024, 3, 6, 12, 0, tzinfo=timezone.utc)


def _snapshot(**overrides) -> OrderSnapshot:
    data = {
        "id": uuid4(),
        "status": OrderStatus.PENDING,
        "company_id": uuid4(),
        "quotation_id": 7,
        "total_amount": Decimal("250.50"),
        "created_at": NOW,
        "updated_at": NOW,
    }
    data.update(overrides)
    return OrderSnapshot(**data)


class TestInputDTOs:
    def test_quotation_id_must_be_positive(self):
        with pytest.raises(ValidationError):
            CreateOrderDTO(quotation_id=0)

    def test_blank_tracking_number_is_treated_as_absent(self):
        dto = StatusUpdateDTO(status="shipped", tracking_number="   ")
        assert dto.tracking_number is None

    def test_tracking_number_is_stripped(self):
        dto = StatusUpdateDTO(status="shipped", tracking_number=" BR123 ")
        assert dto.tracking_number == "BR123"

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            StatusUpdateDTO(status="lost")

    def test_fiscal_fields_only_report_supplied_values(self):
        dto = FiscalFieldsDTO(nfe_url="https://nfe.example.com/1")
        assert dto.is_empty is False
        assert dto.changes() == {"nfe_url": "https://nfe.example.com/1"}
        assert FiscalFieldsDTO().is_empty is True


class TestOrderQueryFilter:
    def test_offset_is_derived_from_page(self):
        assert OrderQueryFilter(page=3, limit=20).offset == 40

    def test_page_must_be_positive(self):
        with pytest.raises(ValidationError):
            OrderQueryFilter(page=0)

    def test_date_range_must_be_ordered(self):
        with pytest.raises(ValidationError):
            OrderQueryFilter(date_from=NOW, date_to=datetime(2024, 1, 1, tzinfo=timezone.utc))


class TestOutputDTOs:
    def test_snapshot_is_frozen(self):
        snapshot = _snapshot()
        with pytest.raises(ValidationError):
            snapshot.status = OrderStatus.CANCELLED

    def test_snapshot_dumps_camel_case_json(self):
        snapshot = _snapshot(estimated_delivery_date=date(2024, 3, 11))
        data = snapshot.model_dump(mode="json", by_alias=True)
        assert data["quotationId"] == 7
        assert data["totalAmount"] == "250.50"
        assert data["estimatedDeliveryDate"] == "2024-03-11"
        assert data["nfeAccessKey"] is None
        assert "quotation_id" not in data

    def test_page_total_pages(self):
        page = OrderPage(items=[_snapshot()], total=41, page=1, limit=20)
        assert page.total_pages == 3
        assert OrderPage(items=[], total=0, page=1, limit=20).total_pages == 0
