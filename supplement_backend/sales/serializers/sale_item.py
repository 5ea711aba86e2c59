# sales/serializers/sale_item.py

from rest_framework import serializers

from sales.models import SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    """
    Sale line item serializer (read-only).
    product_name / unit_price are the checkout snapshot, not the live product.
    """

    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = fields
