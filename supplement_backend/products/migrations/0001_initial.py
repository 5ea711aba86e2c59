from decimal import Decimal
import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(db_index=True, max_length=255)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("Proteínas", "Proteínas"),
                            ("Creatinas", "Creatinas"),
                            ("Pré-Treino", "Pré-Treino"),
                            ("Aminoácidos", "Aminoácidos"),
                            ("Vitaminas", "Vitaminas"),
                            ("Barras e Snacks", "Barras e Snacks"),
                            ("Acessórios", "Acessórios"),
                            ("Outros", "Outros"),
                        ],
                        default="Outros",
                        max_length=32,
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Current selling price.",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "cost",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Purchase cost per unit.",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("stock", models.PositiveIntegerField(default=0)),
                (
                    "min_stock",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Reorder threshold; stock at or below this value is 'low stock'.",
                    ),
                ),
                ("supplier", models.CharField(blank=True, default="", max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "estimated_consumption_days",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="How many days one unit typically lasts a customer.",
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="product_name_idx"),
                    models.Index(fields=["category"], name="product_category_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("stock__gte", 0)),
                        name="chk_product_stock_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("price__gt", 0)),
                        name="chk_product_price_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "movement_type",
                    models.CharField(choices=[("IN", "Stock In"), ("OUT", "Stock Out")], max_length=3),
                ),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("SALE", "Sale"),
                            ("SALE_CANCEL", "Sale Cancellation"),
                            ("ADJUSTMENT", "Manual Adjustment"),
                        ],
                        max_length=20,
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                (
                    "stock_after",
                    models.PositiveIntegerField(help_text="Product stock right after this movement was applied."),
                ),
                ("reference", models.CharField(blank=True, db_index=True, default="", max_length=64)),
                ("note", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_movements",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["product", "created_at"], name="stockmove_product_created_idx"),
                    models.Index(fields=["reason"], name="stockmove_reason_idx"),
                ],
            },
        ),
    ]
