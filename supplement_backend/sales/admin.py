# sales/admin.py

from django.contrib import admin

from sales.models import Sale, SaleItem


# ======================================================
# SALE ADMIN (READ-ONLY)
# ======================================================


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "product_name", "quantity", "unit_price", "subtotal")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "short_id",
        "status",
        "total",
        "payment_method",
        "customer_name",
        "created_at",
    )
    readonly_fields = (
        "total",
        "payment_method",
        "status",
        "customer",
        "customer_name",
        "created_at",
    )
    search_fields = ("id", "customer_name")
    list_filter = ("status", "payment_method", "created_at")
    inlines = [SaleItemInline]

    # Sales are removed only through the cancel workflow (stock + ledger reversal).
    def has_delete_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        return False
