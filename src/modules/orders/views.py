"""Order API views.

Exposes ``OrderLifecycleService`` (commands) and ``OrderQueryService``
(reads) via HTTP using a DRF ViewSet.  Domain exceptions propagate to
``modules.core.exceptions.api_exception_handler``, which maps their kind
to a status code; the view never catches them.
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.companies.permissions import HasCompanyProfile, IsAdminCompany, get_requester
from modules.core.pagination import paginated_response
from modules.orders.repositories import OrderDjangoRepository, OrderHistoryDjangoLedger
from modules.orders.serializers import (
    AdminOrderQuerySerializer,
    CreateOrderSerializer,
    FiscalUpdateSerializer,
    OrderListQuerySerializer,
    StatusUpdateSerializer,
)
from modules.orders.services import OrderLifecycleService
from modules.orders.queries import OrderQueryService
from modules.quotations.pricing import QuotationItemsPricingService
from modules.quotations.repositories import QuotationDjangoRepository

UUID_PATTERN = r"[0-9a-fA-F]{8}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{12}"

ADMIN_PERMISSIONS = [IsAuthenticated, IsAdminCompany]

THROTTLE_SCOPES = {
    "create": "order_creation",
    "update_status": "order_updates",
    "update_fiscal_data": "order_updates",
    "list": "order_listing",
    "retrieve": "order_listing",
    "history": "order_listing",
    "admin_all": "order_listing",
}


def _render(dto: Any) -> Any:
    return dto.model_dump(mode="json", by_alias=True)


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses the order services with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``; all ORM access goes through
    the service/repository layer.
    """

    permission_classes = [IsAuthenticated, HasCompanyProfile]
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        order_repository = OrderDjangoRepository()
        history_ledger = OrderHistoryDjangoLedger()
        self._service = OrderLifecycleService(
            order_repository=order_repository,
            history_ledger=history_ledger,
            quotation_repository=QuotationDjangoRepository(),
            pricing_service=QuotationItemsPricingService(),
        )
        self._queries = OrderQueryService(
            order_repository=order_repository,
            history_ledger=history_ledger,
        )

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scope per action."""
        self.throttle_scope = THROTTLE_SCOPES.get(self.action)
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @extend_schema(request=CreateOrderSerializer)
    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Converts one of the caller's processed quotations into an order.
        """
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        requester = get_requester(request)

        order = self._service.create_from_quotation(
            quotation_id=serializer.to_dto().quotation_id,
            requester_id=requester.company_id,
        )
        return Response(_render(order), status=status.HTTP_201_CREATED)

    @extend_schema(request=StatusUpdateSerializer)
    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request: Request, pk: Optional[str] = None) -> Response:
        """PUT /api/v1/orders/{pk}/status/"""
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        requester = get_requester(request)

        order = self._service.update_status(
            order_id=UUID(pk),
            dto=serializer.to_dto(),
            role=requester.role,
            requester_id=requester.company_id,
        )
        return Response(_render(order))

    @extend_schema(request=FiscalUpdateSerializer)
    @action(detail=True, methods=["patch"], url_path="nfe")
    def update_fiscal_data(self, request: Request, pk: Optional[str] = None) -> Response:
        """PATCH /api/v1/orders/{pk}/nfe/"""
        serializer = FiscalUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        requester = get_requester(request)

        order = self._service.update_fiscal_fields(
            order_id=UUID(pk),
            dto=serializer.to_dto(),
            requester_id=requester.company_id,
            role=requester.role,
        )
        return Response(_render(order))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @extend_schema(parameters=[OrderListQuerySerializer])
    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/ (the caller's own orders, newest first)"""
        query = OrderListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        page = self._queries.list_orders(get_requester(request), query.to_filter())
        return paginated_response(
            [_render(order) for order in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
        )

    def retrieve(self, request: Request, pk: Optional[str] = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._queries.get_order(UUID(pk), get_requester(request))
        return Response(_render(order))

    @action(detail=True, methods=["get"])
    def history(self, request: Request, pk: Optional[str] = None) -> Response:
        """GET /api/v1/orders/{pk}/history/"""
        history = self._queries.get_history(UUID(pk), get_requester(request))
        return Response(_render(history))

    @extend_schema(parameters=[AdminOrderQuerySerializer])
    @action(
        detail=False,
        methods=["get"],
        url_path="admin/all",
        permission_classes=ADMIN_PERMISSIONS,
    )
    def admin_all(self, request: Request) -> Response:
        """GET /api/v1/orders/admin/all/"""
        requester = get_requester(request)
        query = AdminOrderQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        page = self._queries.list_all_orders(requester, query.to_filter())
        return paginated_response(
            [_render(order) for order in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
        )

    @action(
        detail=False,
        methods=["get"],
        url_path="admin/stats",
        permission_classes=ADMIN_PERMISSIONS,
    )
    def admin_stats(self, request: Request) -> Response:
        """GET /api/v1/orders/admin/stats/"""
        stats = self._queries.get_stats(get_requester(request))
        return Response(_render(stats))
