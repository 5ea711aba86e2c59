from decimal import Decimal
import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("sales", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "entry_type",
                    models.CharField(choices=[("income", "Income"), ("expense", "Expense")], max_length=8),
                ),
                ("category", models.CharField(max_length=64)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Positive monetary value",
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("payment_method", models.CharField(blank=True, default="", max_length=16)),
                ("paid", models.BooleanField(default=False)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "related_sale",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["entry_type"], name="ledger_entry_type_idx"),
                    models.Index(fields=["created_at"], name="ledger_created_at_idx"),
                    models.Index(fields=["entry_type", "created_at"], name="ledger_type_created_idx"),
                    models.Index(fields=["related_sale"], name="ledger_related_sale_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="chk_ledger_entry_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("related_sale__isnull", True),
                            models.Q(("entry_type", "income"), ("paid", True)),
                            _connector="OR",
                        ),
                        name="chk_ledger_sale_entry_is_paid_income",
                    ),
                ],
            },
        ),
    ]
