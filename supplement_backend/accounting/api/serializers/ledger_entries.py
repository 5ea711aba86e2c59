# accounting/api/serializers/ledger_entries.py

from rest_framework import serializers

from accounting.models.ledger import LedgerEntry


class LedgerEntrySerializer(serializers.ModelSerializer):
    is_sale_linked = serializers.BooleanField(read_only=True)

    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "entry_type",
            "category",
            "amount",
            "description",
            "payment_method",
            "related_sale",
            "is_sale_linked",
            "paid",
            "due_date",
            "created_at",
        ]
        read_only_fields = fields


class LedgerEntryCreateSerializer(serializers.Serializer):
    """
    Manual cash-book entry (expenses screen).
    related_sale is not accepted: only the sale workflow links sales.
    """

    entry_type = serializers.ChoiceField(choices=LedgerEntry.ENTRY_TYPES)
    category = serializers.CharField(max_length=64)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    description = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    payment_method = serializers.CharField(required=False, allow_blank=True, default="", max_length=16)
    due_date = serializers.DateField(required=False, allow_null=True, default=None)


class MarkPaidSerializer(serializers.Serializer):
    paid = serializers.BooleanField(default=True)
