# accounting/models/ledger.py

"""
======================================================
PATH: accounting/models/ledger.py
======================================================
LEDGER ENTRY MODEL (CASH BOOK)

One income or expense record in the store's financial log.

Guarantees:
- Amount is always positive; direction is via entry_type (income/expense)
- Sale-derived entries point back to their sale via related_sale
  (back-reference, not ownership). The FK is PROTECT, so the sale cannot be
  deleted while its entry exists and the entry never outlives the sale.
- Sale-derived entries cannot be deleted through the model; only the cancel
  workflow removes them (queryset delete inside the cancellation transaction).
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class LedgerEntry(models.Model):
    TYPE_INCOME = "income"
    TYPE_EXPENSE = "expense"

    ENTRY_TYPES = [
        (TYPE_INCOME, "Income"),
        (TYPE_EXPENSE, "Expense"),
    ]

    class ExpenseCategory(models.TextChoices):
        SUPPLIERS = "Fornecedores", "Fornecedores"
        RENT = "Aluguel", "Aluguel"
        SALARIES = "Salários", "Salários"
        ENERGY = "Energia", "Energia"
        MARKETING = "Marketing", "Marketing"
        TAXES = "Impostos", "Impostos"
        MAINTENANCE = "Manutenção", "Manutenção"
        OTHER = "Outros", "Outros"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    entry_type = models.CharField(
        max_length=8,
        choices=ENTRY_TYPES,
    )

    category = models.CharField(max_length=64)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Positive monetary value",
    )

    description = models.CharField(max_length=255, blank=True, default="")

    payment_method = models.CharField(max_length=16, blank=True, default="")

    related_sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="ledger_entries",
    )

    paid = models.BooleanField(default=False)
    due_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["entry_type"], name="ledger_entry_type_idx"),
            models.Index(fields=["created_at"], name="ledger_created_at_idx"),
            models.Index(fields=["entry_type", "created_at"], name="ledger_type_created_idx"),
            models.Index(fields=["related_sale"], name="ledger_related_sale_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_ledger_entry_amount_positive",
            ),
            models.CheckConstraint(
                condition=Q(related_sale__isnull=True) | Q(entry_type="income", paid=True),
                name="chk_ledger_sale_entry_is_paid_income",
            ),
        ]

    def __str__(self):
        return f"{self.entry_type} {self.amount} ({self.category})"

    @property
    def is_sale_linked(self) -> bool:
        return self.related_sale_id is not None

    def clean(self):
        if self.amount is None or Decimal(self.amount) <= 0:
            raise ValidationError("amount must be greater than zero")

        if self.entry_type not in (self.TYPE_INCOME, self.TYPE_EXPENSE):
            raise ValidationError("entry_type must be 'income' or 'expense'")

        if self.related_sale_id and not (self.entry_type == self.TYPE_INCOME and self.paid):
            raise ValidationError("Sale-linked entries must be paid income")

    def delete(self, *args, **kwargs):
        if self.related_sale_id is not None:
            raise ValidationError(
                "Ledger entries linked to a sale cannot be deleted; cancel the sale instead."
            )
        return super().delete(*args, **kwargs)
