# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class Product(models.Model):
    """
    Represents a sellable supplement.

    STOCK MODEL (IMPORTANT):
    - Product.stock is the single authoritative on-hand count
    - Stock is mutated ONLY via products.services.stock
      (sale decrement, cancellation restore, manual adjustment)
    - Database CHECK constraint keeps stock >= 0 even under concurrent writers

    PRICING:
    - price is the current selling price; the price charged on a sale is
      snapshotted into SaleItem.unit_price at checkout time.
    """

    class Category(models.TextChoices):
        PROTEINS = "Proteínas", "Proteínas"
        CREATINES = "Creatinas", "Creatinas"
        PRE_WORKOUT = "Pré-Treino", "Pré-Treino"
        AMINO_ACIDS = "Aminoácidos", "Aminoácidos"
        VITAMINS = "Vitaminas", "Vitaminas"
        BARS_AND_SNACKS = "Barras e Snacks", "Barras e Snacks"
        ACCESSORIES = "Acessórios", "Acessórios"
        OTHER = "Outros", "Outros"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)

    category = models.CharField(
        max_length=32,
        choices=Category.choices,
        default=Category.OTHER,
    )

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Current selling price.",
    )

    cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Purchase cost per unit.",
    )

    stock = models.PositiveIntegerField(default=0)

    min_stock = models.PositiveIntegerField(
        default=0,
        help_text="Reorder threshold; stock at or below this value is 'low stock'.",
    )

    supplier = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")

    estimated_consumption_days = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text="How many days one unit typically lasts a customer.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
            models.Index(fields=["category"], name="product_category_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(stock__gte=0),
                name="chk_product_stock_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(price__gt=0),
                name="chk_product_price_positive",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.category})"

    @property
    def is_low_stock(self) -> bool:
        return int(self.stock or 0) <= int(self.min_stock or 0)

    @property
    def unit_margin(self) -> Decimal:
        return Decimal(self.price or 0) - Decimal(self.cost or 0)

    def clean(self):
        if self.price is None or Decimal(self.price) <= 0:
            raise ValidationError("price must be greater than zero")

        if self.cost is not None and Decimal(self.cost) < 0:
            raise ValidationError("cost cannot be negative")
