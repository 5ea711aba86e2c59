# products/serializers/product.py

"""
PRODUCT SERIALIZERS

Purpose:
- Canonical Product serializer for the inventory screens.
- Initial stock may be set on create; later stock edits are routed through
  the stock service so every change leaves a StockMovement row.
"""

from rest_framework import serializers

from products.models import Product, StockMovement
from products.services.stock import save_product_details


class ProductSerializer(serializers.ModelSerializer):
    """
    GUARANTEES:
    - price > 0, cost >= 0, stock >= 0
    - Stock edits on update become audited ADJUSTMENT movements
    """

    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "category",
            "price",
            "cost",
            "stock",
            "min_stock",
            "supplier",
            "description",
            "estimated_consumption_days",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("name is required")
        return value

    def validate_price(self, value):
        if value is None or value <= 0:
            raise serializers.ValidationError("price must be greater than zero")
        return value

    def validate_cost(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("cost cannot be negative")
        return value

    def update(self, instance, validated_data):
        new_stock = validated_data.pop("stock", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)

        return save_product_details(
            product=instance,
            changed_fields=list(validated_data),
            new_stock=new_stock,
        )


class StockAdjustmentSerializer(serializers.Serializer):
    quantity_delta = serializers.IntegerField(
        help_text="+N to restock, -N to write units off. Cannot be 0.",
    )
    note = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)

    def validate_quantity_delta(self, value):
        if value == 0:
            raise serializers.ValidationError("quantity_delta cannot be 0")
        return value


class StockMovementSerializer(serializers.ModelSerializer):
    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "movement_type",
            "reason",
            "quantity",
            "stock_after",
            "reference",
            "note",
            "created_at",
        ]
        read_only_fields = fields
