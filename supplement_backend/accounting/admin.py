# accounting/admin.py

from django.contrib import admin

from accounting.models.ledger import LedgerEntry

# ============================================================
# LEDGER ENTRY
# ============================================================


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = (
        "created_at",
        "entry_type",
        "category",
        "amount",
        "paid",
        "due_date",
        "related_sale",
    )
    list_filter = ("entry_type", "category", "paid")
    search_fields = ("description", "category")
    ordering = ("-created_at",)

    readonly_fields = (
        "related_sale",
        "created_at",
    )

    # Sale-linked entries are removed only by cancelling the sale.
    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_sale_linked:
            return False
        return super().has_delete_permission(request, obj)

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop("delete_selected", None)
        return actions
