# sales/models/sale_item.py

"""
SALE ITEM (IMMUTABLE SNAPSHOT)

Represents an immutable snapshot of a sold line item.

Notes:
- product_name and unit_price are copied from the Product at checkout so the
  sale never changes when the product is later renamed or repriced
- product FK is SET_NULL: deleting a product keeps the sale history intact
- subtotal is always recomputed as unit_price * quantity
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .sale import Sale


class SaleItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        related_name="sale_items",
    )

    product_name = models.CharField(max_length=255)

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )

    subtotal = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["sale", "created_at"], name="saleitem_sale_created_idx"),
            models.Index(fields=["product", "created_at"], name="saleitem_product_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_sale_item_quantity_positive",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SaleItem records are immutable")

        if not self.quantity or int(self.quantity) <= 0:
            raise ValidationError("SaleItem quantity must be at least 1")

        self.subtotal = (Decimal(self.unit_price) * Decimal(int(self.quantity))).quantize(
            Decimal("0.01")
        )

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
