# products/admin.py
"""
PATH: products/admin.py

Admin rules (audit-safe stock):
- Product master data is editable.
- stock is read-only here; use the adjust-stock endpoint so every change
  leaves a StockMovement row.
- StockMovement rows are append-only and cannot be edited or deleted.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product, StockMovement
from products.services.stock import save_product_details


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "category",
        "price",
        "cost",
        "stock",
        "min_stock",
        "supplier",
        "updated_at",
    )
    list_filter = ("category",)
    search_fields = ("name", "supplier")
    readonly_fields = ("stock", "created_at", "updated_at")

    def save_model(self, request, obj, form, change):
        if not change:
            super().save_model(request, obj, form, change)
            return

        # Never write back the stock loaded with the change form.
        save_product_details(product=obj, changed_fields=form.changed_data)


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = (
        "product",
        "reason",
        "movement_type",
        "quantity",
        "stock_after",
        "reference",
        "created_at",
    )
    list_filter = ("reason", "movement_type")
    search_fields = ("reference", "product__name")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
