# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (POS)

Purpose:
- POS checkout: cart -> committed, immutable sale
- Sales history: list + retrieve with basic filters
- Cancellation: full reversal (stock, ledger) and purge

Filters (query params):
- payment_method
- customer        (customer UUID)
- date_from / date_to  (YYYY-MM-DD, inclusive, store time zone)

Checkout rules:
- Backend authoritative for prices, totals and stock
- Domain errors are returned as {"error": {"code", "message"}}
======================================================
"""

from __future__ import annotations

from datetime import datetime

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.services.exceptions import AccountingServiceError
from backend.errors import domain_error_response
from customers.services.customer_service import CustomerServiceError
from products.services.exceptions import InventoryError
from sales.models import Sale
from sales.serializers import CreateSaleInputSerializer, SaleSerializer
from sales.services.exceptions import SaleWorkflowError
from sales.services.sale_lifecycle import SaleLifecycleError
from sales.services.sale_workflow import cancel_sale, create_sale

DOMAIN_ERRORS = (
    SaleWorkflowError,
    SaleLifecycleError,
    InventoryError,
    CustomerServiceError,
    AccountingServiceError,
)


def _parse_date(s: str):
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        return None


class SaleViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated]

    # ======================================================
    # QUERYSET
    # ======================================================

    def get_queryset(self):
        qs = (
            Sale.objects.all()
            .select_related("customer")
            .prefetch_related("items")
            .order_by("-created_at")
        )

        params = self.request.query_params

        pm = (params.get("payment_method") or "").strip().lower()
        if pm:
            qs = qs.filter(payment_method=pm)

        customer = (params.get("customer") or "").strip()
        if customer:
            qs = qs.filter(customer_id=customer)

        date_from = _parse_date((params.get("date_from") or "").strip())
        if date_from:
            qs = qs.filter(created_at__date__gte=date_from)

        date_to = _parse_date((params.get("date_to") or "").strip())
        if date_to:
            qs = qs.filter(created_at__date__lte=date_to)

        return qs

    @extend_schema(
        parameters=[
            OpenApiParameter("payment_method", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("customer", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date_from", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date_to", str, OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    # ======================================================
    # POS CHECKOUT
    # POST /api/sales/
    # ======================================================

    @extend_schema(
        request=CreateSaleInputSerializer,
        responses={
            201: SaleSerializer,
            400: OpenApiResponse(description="Empty/invalid cart, unknown product or customer"),
            409: OpenApiResponse(description="Insufficient stock"),
            503: OpenApiResponse(description="Database unavailable; nothing saved"),
        },
    )
    def create(self, request, *args, **kwargs):
        ser = CreateSaleInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        customer_id = data.get("customer_id")

        try:
            sale = create_sale(
                cart=[
                    {"product_id": str(line["product_id"]), "quantity": line["quantity"]}
                    for line in data["items"]
                ],
                payment_method=data["payment_method"],
                customer_id=str(customer_id) if customer_id else None,
                notes=data.get("notes", ""),
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

    # ======================================================
    # CANCELLATION
    # POST /api/sales/:id/cancel/
    # ======================================================

    @extend_schema(
        request=None,
        responses={
            200: OpenApiResponse(description="Sale reversed and removed"),
            404: OpenApiResponse(description="Sale not found"),
            503: OpenApiResponse(description="Database unavailable; nothing changed"),
        },
        description="Restore stock, remove the ledger income entry and delete the sale.",
    )
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        try:
            cancel_sale(sale_id=pk)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response({"cancelled": True, "sale_id": str(pk)}, status=status.HTTP_200_OK)
