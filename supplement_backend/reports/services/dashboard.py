# reports/services/dashboard.py

"""
DASHBOARD KPI SERVICE

Read-only aggregations for the home screen and the reports page.

Contract:
- No mutations.
- Money is returned as Decimal quantized to 2 places; views decide the
  JSON representation.
- Revenue / expenses come from the cash ledger (manual income counts as
  revenue), sales counts come from completed sales.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db.models import Count, F, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from accounting.models import LedgerEntry
from products.models import Product
from sales.models import Sale

TWOPLACES = Decimal("0.01")


def _q2(amount) -> Decimal:
    return Decimal(str(amount or "0")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _ledger_total(entry_type: str) -> Decimal:
    total = (
        LedgerEntry.objects.filter(entry_type=entry_type)
        .aggregate(total=Sum("amount"))
        .get("total")
    )
    return _q2(total)


def dashboard_stats() -> dict:
    revenue = _ledger_total(LedgerEntry.TYPE_INCOME)
    expenses = _ledger_total(LedgerEntry.TYPE_EXPENSE)

    return {
        "total_revenue": revenue,
        "total_expenses": expenses,
        "net_profit": _q2(revenue - expenses),
        "total_sales": Sale.objects.filter(status=Sale.STATUS_COMPLETED).count(),
        "low_stock_products": Product.objects.filter(stock__lte=F("min_stock")).count(),
        "total_products": Product.objects.count(),
    }


def low_stock_products(limit: int | None = None):
    if limit is None:
        limit = settings.LOW_STOCK_DASHBOARD_LIMIT
    return list(
        Product.objects.filter(stock__lte=F("min_stock")).order_by("stock", "name")[: max(int(limit), 0)]
    )


def recent_sales(limit: int | None = None):
    if limit is None:
        limit = settings.RECENT_SALES_LIMIT
    return list(
        Sale.objects.prefetch_related("items").order_by("-created_at")[: max(int(limit), 0)]
    )


def daily_sales(days: int = 7) -> list[dict]:
    """
    Completed sales total per local day, oldest first, for the last `days`
    days including today. Days without sales are present with 0.00.
    """
    days = max(int(days), 1)
    today = timezone.localdate()
    first_day = today - timedelta(days=days - 1)

    rows = (
        Sale.objects.filter(
            status=Sale.STATUS_COMPLETED,
            created_at__date__gte=first_day,
            created_at__date__lte=today,
        )
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(total=Sum("total"), count=Count("id"))
    )
    by_day = {row["day"]: row for row in rows}

    out = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        row = by_day.get(day) or {}
        out.append(
            {
                "date": day,
                "label": day.strftime("%d/%m"),
                "total": _q2(row.get("total")),
                "count": int(row.get("count") or 0),
            }
        )
    return out


def category_distribution() -> list[dict]:
    rows = (
        Product.objects.values("category")
        .annotate(value=Count("id"))
        .order_by("-value", "category")
    )
    return [{"name": row["category"], "value": row["value"]} for row in rows]
