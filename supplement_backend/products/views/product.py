# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Inventory management endpoints (CRUD + low stock + manual stock adjustment)

Key rule alignment:
- Stock is never written directly by this view; adjustments go through
  products.services.stock so the non-negative invariant and audit trail hold.
"""

import logging

from django.conf import settings
from django.db import DatabaseError
from django.db.models import F, Q
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import domain_error_response, error_response
from products.models import Product
from products.serializers import (
    ProductSerializer,
    StockAdjustmentSerializer,
    StockMovementSerializer,
)
from products.services.exceptions import InventoryError
from products.services.stock import adjust_stock

logger = logging.getLogger(__name__)


class ProductViewSet(viewsets.ModelViewSet):
    """
    Product endpoints.

    - CRUD
    - GET  /api/products/low-stock/
    - POST /api/products/<id>/adjust-stock/
    - GET  /api/products/<id>/movements/
    """

    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["category", "supplier"]

    def get_queryset(self):
        qs = Product.objects.all().order_by("name")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(name__icontains=q)
                | Q(supplier__icontains=q)
                | Q(description__icontains=q)
            )

        return qs

    # -----------------------------
    # Alerts: Low stock
    # -----------------------------
    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="limit",
                type=int,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Max rows (default LOW_STOCK_DASHBOARD_LIMIT).",
            ),
        ],
        responses={200: ProductSerializer(many=True)},
        description="Products at or below their reorder threshold, lowest stock first.",
    )
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        raw_limit = (request.query_params.get("limit") or "").strip()
        try:
            limit = int(raw_limit) if raw_limit else settings.LOW_STOCK_DASHBOARD_LIMIT
        except ValueError:
            return error_response(
                code="INVALID_LIMIT",
                message="limit must be an integer",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        qs = (
            Product.objects.filter(stock__lte=F("min_stock"))
            .order_by("stock", "name")[: max(limit, 0)]
        )
        return Response(self.get_serializer(qs, many=True).data)

    # -----------------------------
    # Manual stock adjustment
    # -----------------------------
    @extend_schema(
        request=StockAdjustmentSerializer,
        responses={
            200: ProductSerializer,
            400: OpenApiResponse(description="Invalid delta"),
            409: OpenApiResponse(description="Adjustment would make stock negative"),
        },
        description="Restock (+N) or write off (-N) units with an audited stock movement.",
    )
    @action(detail=True, methods=["post"], url_path="adjust-stock")
    def adjust(self, request, pk=None):
        product = self.get_object()

        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            adjust_stock(
                product_id=product.pk,
                quantity_delta=serializer.validated_data["quantity_delta"],
                note=serializer.validated_data.get("note", ""),
            )
        except InventoryError as exc:
            return domain_error_response(exc)
        except DatabaseError:
            logger.exception("Stock adjustment failed for product %s", product.pk)
            return error_response(
                code="STORE_UNAVAILABLE",
                message="Could not save the stock adjustment. Try again.",
                http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        product.refresh_from_db()
        return Response(self.get_serializer(product).data, status=status.HTTP_200_OK)

    @extend_schema(responses={200: StockMovementSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="movements")
    def movements(self, request, pk=None):
        product = self.get_object()
        qs = product.stock_movements.order_by("-created_at")
        return Response(StockMovementSerializer(qs, many=True).data)
