"""Order DRF serializers for API input/output.

The serializers operate at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderItemSerializer(serializers.Serializer):
    """Validates a single line in an order creation request."""

    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class DeliveryAddressSerializer(serializers.Serializer):
    """Checks the known address fields and keeps any extra keys as sent."""

    street = serializers.CharField()
    number = serializers.CharField(required=False, allow_blank=True)
    complement = serializers.CharField(required=False, allow_blank=True)
    neighborhood = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    state = serializers.CharField(required=False, allow_blank=True)
    zip_code = serializers.CharField(required=False, allow_blank=True)

    def to_internal_value(self, data):
        validated = super().to_internal_value(data)
        extra = {key: value for key, value in data.items() if key not in self.fields}
        return {**extra, **validated}


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    producer_id = serializers.UUIDField()
    items = CreateOrderItemSerializer(many=True, allow_empty=False)
    delivery_address = DeliveryAddressSerializer()
    delivery_fee = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, default=0
    )
    notes = serializers.CharField(required=False, default="", allow_blank=True)
    estimated_delivery_time = serializers.DateTimeField(
        required=False, allow_null=True, default=None
    )


class UpdateStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, default="", allow_blank=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.Serializer):
    """Line snapshot as captured at order creation."""

    product_id = serializers.CharField()
    product_name = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    quantity = serializers.IntegerField()
    unit = serializers.CharField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    actor_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "actor_id",
            "actor_role",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with line items and history."""

    consumer_id = serializers.UUIDField(read_only=True)
    producer_id = serializers.UUIDField(read_only=True)
    logistics_id = serializers.UUIDField(read_only=True, allow_null=True)
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "consumer_id",
            "producer_id",
            "logistics_id",
            "status",
            "items",
            "delivery_fee",
            "total_amount",
            "delivery_address",
            "notes",
            "estimated_delivery_time",
            "delivered_at",
            "created_at",
            "updated_at",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lighter serializer for lists (no history)."""

    consumer_id = serializers.UUIDField(read_only=True)
    producer_id = serializers.UUIDField(read_only=True)
    logistics_id = serializers.UUIDField(read_only=True, allow_null=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "consumer_id",
            "producer_id",
            "logistics_id",
            "status",
            "items",
            "delivery_fee",
            "total_amount",
            "delivery_address",
            "created_at",
        ]
        read_only_fields = fields


class StatisticsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    pending = serializers.IntegerField()
    confirmed = serializers.IntegerField()
    preparing = serializers.IntegerField()
    ready = serializers.IntegerField()
    in_delivery = serializers.IntegerField()
    delivered = serializers.IntegerField()
    cancelled = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)


class PeriodSerializer(serializers.Serializer):
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()


class OrderStatisticsSerializer(serializers.Serializer):
    statistics = StatisticsSerializer()
    period = PeriodSerializer()
