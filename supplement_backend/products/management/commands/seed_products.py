# products/management/commands/seed_products.py

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from products.models import Product

SAMPLE_PRODUCTS = [
    # name, category, price, cost, stock, min_stock, supplier, description
    (
        "Whey Protein Concentrado 900g",
        Product.Category.PROTEINS,
        "89.90",
        "55.00",
        45,
        10,
        "Growth Supplements",
        "Whey protein concentrado de alta qualidade",
    ),
    (
        "Creatina Monohidratada 300g",
        Product.Category.CREATINES,
        "69.90",
        "42.00",
        8,
        15,
        "Max Titanium",
        "Creatina pura micronizada",
    ),
    (
        "Pré-Treino Horus 300g",
        Product.Category.PRE_WORKOUT,
        "79.90",
        "48.00",
        22,
        10,
        "Iridium Labs",
        "Pré-treino com cafeína e beta-alanina",
    ),
    (
        "BCAA 2:1:1 120 caps",
        Product.Category.AMINO_ACIDS,
        "54.90",
        "32.00",
        30,
        12,
        "Integralmedica",
        "Aminoácidos de cadeia ramificada",
    ),
    (
        "Multivitamínico 60 caps",
        Product.Category.VITAMINS,
        "39.90",
        "22.00",
        5,
        10,
        "Vitafor",
        "Complexo vitamínico completo",
    ),
]


class Command(BaseCommand):
    help = "Seed the catalogue with sample supplement products (idempotent by name)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products..."))

        created_count = 0
        for name, category, price, cost, stock, min_stock, supplier, description in SAMPLE_PRODUCTS:
            _, created = Product.objects.get_or_create(
                name=name,
                defaults={
                    "category": category,
                    "price": Decimal(price),
                    "cost": Decimal(cost),
                    "stock": stock,
                    "min_stock": min_stock,
                    "supplier": supplier,
                    "description": description,
                },
            )
            if created:
                created_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Products seeded: {created_count} created, "
                f"{len(SAMPLE_PRODUCTS) - created_count} already present."
            )
        )
