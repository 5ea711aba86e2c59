# products/models/stock_movement.py

"""
INVENTORY AUDIT TRAIL

Immutable record of every stock mutation performed by the stock service.

GUARANTEES:
- Append-only (no updates, no deletes through the model)
- Movement direction validated against reason
- Sale-linked movements keep a textual reference ("SALE:<uuid>") instead of a
  foreign key, so the trail survives the sale being purged on cancellation
"""

import uuid

from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"

    class Reason(models.TextChoices):
        SALE = "SALE", "Sale"
        SALE_CANCEL = "SALE_CANCEL", "Sale Cancellation"
        ADJUSTMENT = "ADJUSTMENT", "Manual Adjustment"

    REASON_TO_MOVEMENT = {
        Reason.SALE: MovementType.OUT,
        Reason.SALE_CANCEL: MovementType.IN,
        Reason.ADJUSTMENT: None,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=3, choices=MovementType.choices)
    reason = models.CharField(max_length=20, choices=Reason.choices)

    quantity = models.PositiveIntegerField()

    stock_after = models.PositiveIntegerField(
        help_text="Product stock right after this movement was applied.",
    )

    reference = models.CharField(max_length=64, blank=True, default="", db_index=True)
    note = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["product", "created_at"], name="stockmove_product_created_idx"),
            models.Index(fields=["reason"], name="stockmove_reason_idx"),
        ]

    def clean(self):
        if not self.quantity or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        expected_type = self.REASON_TO_MOVEMENT.get(self.reason)
        if expected_type and self.movement_type != expected_type:
            raise ValidationError(
                f"{self.reason} requires movement_type={expected_type}"
            )

        if self.reason in {self.Reason.SALE, self.Reason.SALE_CANCEL} and not self.reference:
            raise ValidationError("SALE / SALE_CANCEL movements must reference a sale")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Stock movements are immutable")
        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Stock movements cannot be deleted")

    def __str__(self):
        return f"{self.reason} {self.movement_type} {self.quantity} x {self.product_id}"
