"""Product DRF serializers for API input/output.

The serializers operate at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class ProductCreateSerializer(serializers.Serializer):
    name = serializers.CharField()
    description = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    category = serializers.CharField()
    stock = serializers.IntegerField(required=False, default=0)
    unit = serializers.CharField(required=False, allow_blank=True)
    image_url = serializers.URLField(required=False, allow_blank=True)
    is_available = serializers.BooleanField(required=False, default=True)


class ProductUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False)
    description = serializers.CharField(required=False)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    category = serializers.CharField(required=False)
    unit = serializers.CharField(required=False)
    image_url = serializers.URLField(required=False, allow_blank=True)
    is_available = serializers.BooleanField(required=False)


class StockSerializer(serializers.Serializer):
    stock = serializers.IntegerField(min_value=0)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for the Product resource."""

    producer_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "producer_id",
            "name",
            "description",
            "price",
            "stock",
            "unit",
            "category",
            "image_url",
            "is_available",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
