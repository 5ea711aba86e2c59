# reports/api/views.py

"""
REPORTS API (READ-ONLY)

GET /api/reports/dashboard/              KPIs + low stock + recent sales
GET /api/reports/daily-sales/?days=7     completed sales per day, zero-filled
GET /api/reports/category-distribution/  product count per category

Reports screen (?period=7d|30d|90d|all|custom [&days=N | &months=N]):
GET /api/reports/summary/               KPIs for the window
GET /api/reports/top-products/          best sellers by units
GET /api/reports/expenses-by-category/  expense totals per category
GET /api/reports/financial-evolution/   income / expense / profit per day
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import domain_error_response, error_response
from products.serializers import ProductSerializer
from reports.services.dashboard import (
    category_distribution,
    daily_sales,
    dashboard_stats,
    low_stock_products,
    recent_sales,
)
from reports.services.period_report import (
    ReportPeriodError,
    expenses_by_category,
    financial_evolution,
    period_summary,
    resolve_period,
    top_products,
)
from sales.serializers import SaleSerializer

MAX_DAYS = 366
TOP_PRODUCTS_LIMIT = 5
MAX_TOP_PRODUCTS = 50


def _as_str(v) -> str:
    return f"{v:.2f}"


class DashboardView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["reports"], responses={200: dict})
    def get(self, request):
        stats = dashboard_stats()
        for key in ("total_revenue", "total_expenses", "net_profit"):
            stats[key] = _as_str(stats[key])

        return Response(
            {
                "stats": stats,
                "low_stock": ProductSerializer(low_stock_products(), many=True).data,
                "recent_sales": SaleSerializer(recent_sales(), many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class DailySalesView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["reports"],
        parameters=[
            OpenApiParameter("days", int, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: dict},
    )
    def get(self, request):
        raw = (request.query_params.get("days") or "7").strip()
        try:
            days = int(raw)
        except ValueError:
            days = 0

        if days < 1 or days > MAX_DAYS:
            return error_response(
                code="INVALID_DAYS",
                message=f"days must be an integer between 1 and {MAX_DAYS}",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        rows = [
            {
                "date": row["date"].isoformat(),
                "label": row["label"],
                "total": _as_str(row["total"]),
                "count": row["count"],
            }
            for row in daily_sales(days)
        ]
        return Response({"days": days, "results": rows}, status=status.HTTP_200_OK)


class CategoryDistributionView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["reports"], responses={200: dict})
    def get(self, request):
        return Response({"results": category_distribution()}, status=status.HTTP_200_OK)


PERIOD_PARAMETERS = [
    OpenApiParameter(
        "period",
        str,
        OpenApiParameter.QUERY,
        required=False,
        enum=["7d", "30d", "90d", "all", "custom"],
        description="Rolling window (default 30d).",
    ),
    OpenApiParameter("days", int, OpenApiParameter.QUERY, required=False, description="custom only"),
    OpenApiParameter("months", int, OpenApiParameter.QUERY, required=False, description="custom only"),
]


def _period_from_request(request):
    params = request.query_params
    return resolve_period(
        params.get("period"),
        days=params.get("days"),
        months=params.get("months"),
    )


class PeriodReportView(APIView):
    """
    Base for the reports-screen endpoints: resolves ?period= and turns an
    invalid window into INVALID_PERIOD.
    """

    permission_classes = [IsAuthenticated]

    def build(self, period) -> dict:
        raise NotImplementedError

    def get(self, request):
        try:
            period = _period_from_request(request)
        except ReportPeriodError as exc:
            return domain_error_response(exc)

        return Response(self.build(period), status=status.HTTP_200_OK)


@extend_schema(tags=["reports"], parameters=PERIOD_PARAMETERS, responses={200: dict})
class SummaryView(PeriodReportView):
    def build(self, period) -> dict:
        summary = period_summary(period)
        for key in ("total_revenue", "total_expenses", "net_profit", "average_ticket"):
            summary[key] = _as_str(summary[key])
        return summary


@extend_schema(
    tags=["reports"],
    parameters=PERIOD_PARAMETERS
    + [OpenApiParameter("limit", int, OpenApiParameter.QUERY, required=False)],
    responses={200: dict},
)
class TopProductsView(PeriodReportView):
    def get(self, request):
        raw = (request.query_params.get("limit") or str(TOP_PRODUCTS_LIMIT)).strip()
        try:
            self.limit = int(raw)
        except ValueError:
            self.limit = 0

        if self.limit < 1 or self.limit > MAX_TOP_PRODUCTS:
            return error_response(
                code="INVALID_LIMIT",
                message=f"limit must be an integer between 1 and {MAX_TOP_PRODUCTS}",
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        return super().get(request)

    def build(self, period) -> dict:
        rows = [
            {**row, "revenue": _as_str(row["revenue"])}
            for row in top_products(period, limit=self.limit)
        ]
        return {**period.as_dict(), "results": rows}


@extend_schema(tags=["reports"], parameters=PERIOD_PARAMETERS, responses={200: dict})
class ExpensesByCategoryView(PeriodReportView):
    def build(self, period) -> dict:
        rows = [
            {"name": row["name"], "value": _as_str(row["value"])}
            for row in expenses_by_category(period)
        ]
        return {**period.as_dict(), "results": rows}


@extend_schema(tags=["reports"], parameters=PERIOD_PARAMETERS, responses={200: dict})
class FinancialEvolutionView(PeriodReportView):
    def build(self, period) -> dict:
        rows = [
            {
                "date": row["date"].isoformat(),
                "label": row["label"],
                "income": _as_str(row["income"]),
                "expense": _as_str(row["expense"]),
                "profit": _as_str(row["profit"]),
            }
            for row in financial_evolution(period)
        ]
        return {**period.as_dict(), "results": rows}
