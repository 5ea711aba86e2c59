# reports/services/period_report.py

"""
PERIOD REPORT SERVICE

Aggregations behind the reports screen, restricted to a rolling window:

- "7d" / "30d" / "90d": the last N days (now - N*24h)
- "custom": `days`, or `months` counted as 30 days each
- "all": no window

Contract:
- Read-only.
- Money is Decimal quantized to 2 places.
- Stock counts are a snapshot of today; they ignore the window.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Count, F, Max, Q, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from accounting.models import LedgerEntry
from products.models import Product
from sales.models import Sale, SaleItem

TWOPLACES = Decimal("0.01")

PRESET_DAYS = {"7d": 7, "30d": 30, "90d": 90}
PERIOD_ALL = "all"
PERIOD_CUSTOM = "custom"
DEFAULT_PERIOD = "30d"

MAX_WINDOW_DAYS = 3660
EVOLUTION_FALLBACK_DAYS = 30


class ReportPeriodError(Exception):
    code = "INVALID_PERIOD"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class ReportPeriod:
    key: str
    days: int | None
    start: datetime | None

    def as_dict(self) -> dict:
        return {
            "period": self.key,
            "days": self.days,
            "start": self.start.isoformat() if self.start else None,
        }


def _q2(amount) -> Decimal:
    return Decimal(str(amount or "0")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _positive_int(raw, name: str) -> int | None:
    if raw in (None, ""):
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ReportPeriodError(f"{name} must be a positive integer")
    if value < 1:
        raise ReportPeriodError(f"{name} must be a positive integer")
    return value


def resolve_period(period: str | None = None, *, days=None, months=None) -> ReportPeriod:
    key = (period or DEFAULT_PERIOD).strip().lower()

    if key == PERIOD_ALL:
        return ReportPeriod(key=key, days=None, start=None)

    if key in PRESET_DAYS:
        window = PRESET_DAYS[key]
    elif key == PERIOD_CUSTOM:
        custom_days = _positive_int(days, "days")
        custom_months = _positive_int(months, "months")
        if custom_days is not None:
            window = custom_days
        elif custom_months is not None:
            window = custom_months * 30
        else:
            # custom with nothing filled in behaves like "all"
            return ReportPeriod(key=key, days=None, start=None)
    else:
        raise ReportPeriodError("period must be one of 7d, 30d, 90d, all, custom")

    if window > MAX_WINDOW_DAYS:
        raise ReportPeriodError(f"period cannot exceed {MAX_WINDOW_DAYS} days")

    return ReportPeriod(key=key, days=window, start=timezone.now() - timedelta(days=window))


def _window(period: ReportPeriod, field: str = "created_at") -> Q:
    if period.start is None:
        return Q()
    return Q(**{f"{field}__gte": period.start})


def period_summary(period: ReportPeriod) -> dict:
    ledger = LedgerEntry.objects.filter(_window(period)).aggregate(
        income=Sum("amount", filter=Q(entry_type=LedgerEntry.TYPE_INCOME)),
        expense=Sum("amount", filter=Q(entry_type=LedgerEntry.TYPE_EXPENSE)),
    )
    revenue = _q2(ledger["income"])
    expenses = _q2(ledger["expense"])

    sales = Sale.objects.filter(_window(period), status=Sale.STATUS_COMPLETED).aggregate(
        count=Count("id"),
        sales_total=Sum("total"),
    )
    sales_count = int(sales["count"] or 0)
    average_ticket = _q2(_q2(sales["sales_total"]) / sales_count) if sales_count else _q2(0)

    return {
        **period.as_dict(),
        "total_revenue": revenue,
        "total_expenses": expenses,
        "net_profit": _q2(revenue - expenses),
        "total_sales": sales_count,
        "average_ticket": average_ticket,
        "low_stock_count": Product.objects.filter(stock__gt=0, stock__lte=F("min_stock")).count(),
        "out_of_stock_count": Product.objects.filter(stock=0).count(),
        "total_products": Product.objects.count(),
    }


def top_products(period: ReportPeriod, limit: int = 5) -> list[dict]:
    """
    Best sellers by units in the window, with the revenue actually charged
    (sum of item subtotals). Lines whose product was deleted are left out.
    """
    rows = (
        SaleItem.objects.filter(
            _window(period, "sale__created_at"),
            sale__status=Sale.STATUS_COMPLETED,
            product__isnull=False,
        )
        .values("product")
        .annotate(
            name=Max("product_name"),
            units=Sum("quantity"),
            revenue=Sum("subtotal"),
        )
        .order_by("-units", "name")[: max(int(limit), 0)]
    )
    return [
        {
            "product_id": row["product"],
            "name": row["name"],
            "units": int(row["units"] or 0),
            "revenue": _q2(row["revenue"]),
        }
        for row in rows
    ]


def expenses_by_category(period: ReportPeriod) -> list[dict]:
    rows = (
        LedgerEntry.objects.filter(_window(period), entry_type=LedgerEntry.TYPE_EXPENSE)
        .values("category")
        .annotate(value=Sum("amount"))
        .order_by("-value", "category")
    )
    return [{"name": row["category"], "value": _q2(row["value"])} for row in rows]


def financial_evolution(period: ReportPeriod) -> list[dict]:
    """
    Income, expense and profit per local day, oldest first, zero-filled.
    Unbounded periods chart the last 30 days.
    """
    days = period.days or EVOLUTION_FALLBACK_DAYS
    today = timezone.localdate()
    first_day = today - timedelta(days=days - 1)

    rows = (
        LedgerEntry.objects.filter(
            _window(period),
            created_at__date__gte=first_day,
            created_at__date__lte=today,
        )
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(
            income=Sum("amount", filter=Q(entry_type=LedgerEntry.TYPE_INCOME)),
            expense=Sum("amount", filter=Q(entry_type=LedgerEntry.TYPE_EXPENSE)),
        )
    )
    by_day = {row["day"]: row for row in rows}

    out = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        row = by_day.get(day) or {}
        income = _q2(row.get("income"))
        expense = _q2(row.get("expense"))
        out.append(
            {
                "date": day,
                "label": day.strftime("%d/%m"),
                "income": income,
                "expense": expense,
                "profit": _q2(income - expense),
            }
        )
    return out
