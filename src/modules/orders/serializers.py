"""Order DRF serializers for API input.

The serializers operate at the Interface layer (API views): they check the
shape of requests and translate camelCase fields into the Pydantic DTOs
from ``dtos.py``.  Business rules (transitions, NF-e checksum...) live in
the Service Layer.  Responses are rendered from the DTOs directly.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Dict, Optional

from django.utils import timezone
from rest_framework import serializers

from modules.core.pagination import PageQuerySerializer
from modules.orders.constants import OrderStatus
from modules.orders.dtos import (
    CreateOrderDTO,
    FiscalFieldsDTO,
    OrderQueryFilter,
    StatusUpdateDTO,
)

# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class CreateOrderSerializer(serializers.Serializer):
    quotationId = serializers.IntegerField(min_value=1, source="quotation_id")

    def to_dto(self) -> CreateOrderDTO:
        return CreateOrderDTO(**self.validated_data)


class FiscalUpdateSerializer(serializers.Serializer):
    """Both fields optional; the service requires at least one."""

    nfeAccessKey = serializers.CharField(required=False, source="nfe_access_key")
    nfeUrl = serializers.CharField(required=False, max_length=500, source="nfe_url")

    def to_dto(self) -> FiscalFieldsDTO:
        return FiscalFieldsDTO(**self.validated_data)


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    trackingNumber = serializers.CharField(
        required=False, allow_blank=True, max_length=100, source="tracking_number"
    )
    estimatedDeliveryDate = serializers.DateField(
        required=False, source="estimated_delivery_date"
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    nfeAccessKey = serializers.CharField(required=False, source="nfe_access_key")
    nfeUrl = serializers.CharField(required=False, max_length=500, source="nfe_url")

    def to_dto(self) -> StatusUpdateDTO:
        return StatusUpdateDTO(**self.validated_data)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class OrderListQuerySerializer(PageQuerySerializer):
    """``GET /orders/?status=&page=&limit=``"""

    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)

    def to_filter(self) -> OrderQueryFilter:
        data = self.validated_data
        return OrderQueryFilter(
            status=data.get("status"),
            page=data["page"],
            limit=data["limit"],
        )


class AdminOrderQuerySerializer(OrderListQuerySerializer):
    """``GET /orders/admin/all/?status=&startDate=&endDate=&page=&limit=``

    Dates are inclusive calendar days in the active time zone.
    """

    default_limit = 50

    startDate = serializers.DateField(required=False, source="start_date")
    endDate = serializers.DateField(required=False, source="end_date")

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        attrs = super().validate(attrs)
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError({"endDate": "endDate must not be before startDate."})
        return attrs

    def to_filter(self) -> OrderQueryFilter:
        data = self.validated_data
        return OrderQueryFilter(
            status=data.get("status"),
            date_from=_day_boundary(data.get("start_date"), time.min),
            date_to=_day_boundary(data.get("end_date"), time.max),
            page=data["page"],
            limit=data["limit"],
        )


def _day_boundary(day: Optional[date], at: time) -> Optional[datetime]:
    if day is None:
        return None
    return timezone.make_aware(datetime.combine(day, at))
