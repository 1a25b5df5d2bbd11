"""Product API views.

Exposes the ``CatalogService`` via HTTP using a DRF ViewSet.
Catalog reads are public; every write requires a producer token and
ownership of the product.  Domain exceptions propagate to the project
exception handler.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.accounts.permissions import IsProducer
from modules.core.authentication import get_actor
from modules.core.responses import envelope
from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import (
    ProductCreateSerializer,
    ProductSerializer,
    ProductUpdateSerializer,
    StockSerializer,
)
from modules.products.services import CatalogService

PUBLIC_ACTIONS = frozenset({"list", "retrieve", "categories"})


class ProductViewSet(ViewSet):
    """ViewSet for the catalog.

    Uses ``CatalogService`` with ``ProductDjangoRepository`` (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CatalogService(repository=ProductDjangoRepository())

    def get_permissions(self):
        if self.action in PUBLIC_ACTIONS:
            return [AllowAny()]
        return [IsProducer()]

    # ------------------------------------------------------------------
    # Public catalog
    # ------------------------------------------------------------------

    @extend_schema(
        parameters=[
            OpenApiParameter("category", str, required=False),
            OpenApiParameter("search", str, required=False),
        ],
        responses={200: ProductSerializer(many=True)},
    )
    def list(self, request: Request) -> Response:
        """GET /api/v1/products"""
        products = self._service.list_available(
            category=request.query_params.get("category") or None,
            search=request.query_params.get("search") or None,
        )
        return envelope(ProductSerializer(products, many=True).data)

    @action(detail=False, methods=["get"], url_path="categories")
    def categories(self, request: Request) -> Response:
        """GET /api/v1/products/categories"""
        return envelope(self._service.list_categories())

    @extend_schema(responses={200: ProductSerializer})
    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}"""
        product = self._service.get_product(pk)
        return envelope(ProductSerializer(product).data)

    # ------------------------------------------------------------------
    # Producer catalog management
    # ------------------------------------------------------------------

    @extend_schema(responses={200: ProductSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="my")
    def my(self, request: Request) -> Response:
        """GET /api/v1/products/my"""
        products = self._service.list_by_producer(str(get_actor(request).id))
        return envelope(ProductSerializer(products, many=True).data)

    @extend_schema(request=ProductCreateSerializer, responses={201: ProductSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/products"""
        serializer = ProductCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = self._service.create_product(
            get_actor(request), CreateProductDTO(**serializer.validated_data)
        )
        return envelope(
            ProductSerializer(product).data,
            message="Product created successfully.",
            status_code=status.HTTP_201_CREATED,
        )

    @extend_schema(request=ProductUpdateSerializer, responses={200: ProductSerializer})
    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}"""
        serializer = ProductUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        product = self._service.update_product(
            get_actor(request), pk, UpdateProductDTO(**serializer.validated_data)
        )
        return envelope(
            ProductSerializer(product).data, message="Product updated successfully."
        )

    @extend_schema(request=StockSerializer, responses={200: ProductSerializer})
    @action(detail=True, methods=["put"], url_path="stock")
    def stock(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}/stock

        Accepts ``{"stock": N}``.
        """
        serializer = StockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = self._service.set_stock(
            get_actor(request), pk, serializer.validated_data["stock"]
        )
        return envelope(
            ProductSerializer(product).data, message="Stock updated successfully."
        )

    @extend_schema(request=None, responses={200: ProductSerializer})
    @action(detail=True, methods=["put"], url_path="toggle-availability")
    def toggle_availability(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}/toggle-availability"""
        product = self._service.toggle_availability(get_actor(request), pk)
        state = "enabled" if product.is_available else "disabled"
        return envelope(ProductSerializer(product).data, message=f"Product {state}.")

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}"""
        self._service.delete_product(get_actor(request), pk)
        return envelope(message="Product deleted successfully.")
