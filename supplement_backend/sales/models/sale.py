# sales/models/sale.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Sale(models.Model):
    """
    Represents a committed POS sale (header of the Sale aggregate).

    GUARANTEES:
    - Created ONLY by sales.services.sale_workflow.create_sale
    - total == sum(item.subtotal) (computed server-side from current prices)
    - Financial fields are immutable once saved
    - Owns its SaleItem rows (CASCADE)
    - customer_name is a snapshot: later customer edits never rewrite history

    LIFECYCLE:
    - completed is set at creation
    - cancellation is validated as completed -> cancelled and then purges the
      aggregate (see sale_workflow.cancel_sale); cancelled rows are not kept
    """

    STATUS_COMPLETED = "completed"
    STATUS_PENDING = "pending"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_COMPLETED, "Completed"),
        (STATUS_PENDING, "Pending"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_CASH = "cash"
    PAYMENT_CREDIT = "credit"
    PAYMENT_DEBIT = "debit"
    PAYMENT_PIX = "pix"

    PAYMENT_METHOD_CHOICES = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_CREDIT, "Credit card"),
        (PAYMENT_DEBIT, "Debit card"),
        (PAYMENT_PIX, "PIX"),
    ]

    PAYMENT_METHODS = {value for value, _ in PAYMENT_METHOD_CHOICES}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    total = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    payment_method = models.CharField(
        max_length=16,
        choices=PAYMENT_METHOD_CHOICES,
        default=PAYMENT_CASH,
    )

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_COMPLETED,
    )

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales",
    )

    customer_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Customer name at time of sale (snapshot).",
    )

    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="sale_status_idx"),
            models.Index(fields=["payment_method"], name="sale_payment_method_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total__gte=0),
                name="chk_sale_total_non_negative",
            ),
        ]

    _IMMUTABLE_FIELDS = (
        "total",
        "payment_method",
        "customer_id",
        "customer_name",
        "created_at",
    )

    @property
    def short_id(self) -> str:
        return str(self.id)[:8]

    def _validate_immutable(self, previous: "Sale"):
        for field in self._IMMUTABLE_FIELDS:
            current, before = getattr(self, field), getattr(previous, field)
            if field == "total":
                current, before = Decimal(str(current)), Decimal(str(before))
            if current != before:
                raise ValidationError(
                    f"Sale is immutable once recorded. Field '{field}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if self.payment_method not in self.PAYMENT_METHODS:
            raise ValidationError(f"Invalid payment method: {self.payment_method}")

        super().save(*args, **kwargs)

    def __str__(self):
        return f"Sale #{self.short_id} | {self.total}"
