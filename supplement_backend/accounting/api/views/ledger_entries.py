# accounting/api/views/ledger_entries.py

"""
LEDGER ENTRIES API (CASH BOOK)

GET    /api/accounting/entries/                 list (filters: entry_type, category, paid)
POST   /api/accounting/entries/                 manual income / expense
GET    /api/accounting/entries/<id>/
DELETE /api/accounting/entries/<id>/            refused for sale-linked entries
POST   /api/accounting/entries/<id>/mark-paid/  {"paid": true|false}

Sale income entries are created and removed only by the sale workflow.
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.serializers import (
    LedgerEntryCreateSerializer,
    LedgerEntrySerializer,
    MarkPaidSerializer,
)
from accounting.models import LedgerEntry
from accounting.services.exceptions import AccountingServiceError
from accounting.services.ledger_service import delete_entry, record_entry, set_paid_status
from backend.errors import domain_error_response


class LedgerEntryViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = LedgerEntrySerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["entry_type", "category", "paid"]

    def get_queryset(self):
        return LedgerEntry.objects.all().order_by("-created_at")

    @extend_schema(
        tags=["accounting"],
        request=LedgerEntryCreateSerializer,
        responses={201: LedgerEntrySerializer, 400: OpenApiResponse(description="Invalid entry")},
    )
    def create(self, request, *args, **kwargs):
        s = LedgerEntryCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            entry = record_entry(**s.validated_data)
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["accounting"],
        responses={
            204: None,
            404: OpenApiResponse(description="Entry not found"),
            409: OpenApiResponse(description="Entry is linked to a sale"),
        },
    )
    def destroy(self, request, *args, **kwargs):
        entry = self.get_object()

        try:
            delete_entry(entry_id=entry.pk)
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["accounting"],
        request=MarkPaidSerializer,
        responses={200: LedgerEntrySerializer},
    )
    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):
        entry = self.get_object()

        s = MarkPaidSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            entry = set_paid_status(entry_id=entry.pk, paid=s.validated_data["paid"])
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_200_OK)
