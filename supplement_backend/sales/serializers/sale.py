# sales/serializers/sale.py

from rest_framework import serializers

from sales.models import Sale

from .sale_item import SaleItemSerializer


class SaleSerializer(serializers.ModelSerializer):
    """
    CANONICAL SALE SERIALIZER

    - Used for sales history and receipts
    - Read-only: sales are created via CreateSaleInputSerializer + sale_workflow
    """

    short_id = serializers.CharField(read_only=True)
    items = SaleItemSerializer(many=True, read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "short_id",
            "total",
            "payment_method",
            "status",
            "customer",
            "customer_name",
            "notes",
            "created_at",
            "items",
        ]
        read_only_fields = fields


class CartLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class CreateSaleInputSerializer(serializers.Serializer):
    """
    POS checkout payload.

    Prices are never accepted from the client; the workflow reads them from
    the product rows it locks.
    """

    items = CartLineInputSerializer(many=True, allow_empty=True)
    payment_method = serializers.CharField()
    customer_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
