"""Order API views.

Exposes the ``OrderService`` via HTTP using a DRF ViewSet.  Domain
exceptions propagate to the project exception handler, which renders
the response envelope.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.permissions import IsConsumer, IsLogistics, IsProducer
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.core.authentication import get_actor
from modules.core.responses import envelope
from modules.orders.dtos import (
    CreateOrderDTO,
    DeliveryAddressDTO,
    OrderItemRequestDTO,
    UpdateStatusDTO,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatisticsSerializer,
    UpdateStatusSerializer,
)
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import CatalogService

ACTION_PERMISSIONS = {
    "create": [IsConsumer],
    "assign_logistics": [IsLogistics],
    "available_for_logistics": [IsLogistics],
    "statistics": [IsProducer],
}


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    filter_backends = [DjangoFilterBackend]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            catalog=CatalogService(repository=ProductDjangoRepository()),
            user_repository=UserDjangoRepository(),
        )

    def get_permissions(self):
        classes = ACTION_PERMISSIONS.get(self.action, [IsAuthenticated])
        return [permission() for permission in classes]

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scopes per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Order.objects.none()
        return self._service.list_orders(get_actor(self.request))

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @extend_schema(request=CreateOrderSerializer, responses={201: OrderSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/orders"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        dto = CreateOrderDTO(
            producer_id=data["producer_id"],
            items=[
                OrderItemRequestDTO(
                    product_id=item["product_id"],
                    quantity=item["quantity"],
                )
                for item in data["items"]
            ],
            delivery_address=DeliveryAddressDTO(**data["delivery_address"]),
            delivery_fee=data["delivery_fee"],
            notes=data["notes"],
            estimated_delivery_time=data["estimated_delivery_time"],
        )

        order = self._service.create_order(get_actor(request), dto)
        return envelope(
            OrderSerializer(order).data,
            message="Order created successfully.",
            status_code=status.HTTP_201_CREATED,
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    @extend_schema(responses={200: OrderListSerializer(many=True)})
    def list(self, request: Request) -> Response:
        """GET /api/v1/orders

        Role scoping comes from the service; ``OrderFilter`` narrows it
        by status, date range and total range.
        """
        orders = list(self.filter_queryset(self.get_queryset()))
        return envelope(
            {
                "orders": OrderListSerializer(orders, many=True).data,
                "total": len(orders),
            }
        )

    @extend_schema(responses={200: OrderSerializer})
    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}"""
        order = self._service.get_order(get_actor(request), pk)
        return envelope(OrderSerializer(order).data)

    @extend_schema(responses={200: OrderListSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="available-for-logistics")
    def available_for_logistics(self, request: Request) -> Response:
        """GET /api/v1/orders/available-for-logistics"""
        orders = self._service.list_available_for_logistics(get_actor(request))
        return envelope(
            {
                "orders": OrderListSerializer(orders, many=True).data,
                "total": len(orders),
            }
        )

    @extend_schema(responses={200: OrderStatisticsSerializer})
    @action(detail=False, methods=["get"], url_path="statistics")
    def statistics(self, request: Request) -> Response:
        """GET /api/v1/orders/statistics"""
        result = self._service.get_statistics(get_actor(request))
        return envelope(OrderStatisticsSerializer(result).data)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @extend_schema(request=UpdateStatusSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/status"""
        serializer = UpdateStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.update_status(
            get_actor(request), pk, UpdateStatusDTO(**serializer.validated_data)
        )
        return envelope(
            OrderSerializer(order).data, message="Order status updated successfully."
        )

    @extend_schema(request=None, responses={200: OrderSerializer})
    @action(detail=True, methods=["put"], url_path="assign-logistics")
    def assign_logistics(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/assign-logistics"""
        order = self._service.assign_logistics(get_actor(request), pk)
        return envelope(
            OrderSerializer(order).data, message="Delivery assigned successfully."
        )

    @extend_schema(request=CancelOrderSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["put"], url_path="cancel")
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/cancel

        Cancels the order and releases its reserved stock.
        """
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.cancel_order(
            get_actor(request), pk, serializer.validated_data["reason"]
        )
        return envelope(
            OrderSerializer(order).data, message="Order cancelled successfully."
        )
