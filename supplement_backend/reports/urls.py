# reports/urls.py

from django.urls import path

from reports.api.views import (
    CategoryDistributionView,
    DailySalesView,
    DashboardView,
    ExpensesByCategoryView,
    FinancialEvolutionView,
    SummaryView,
    TopProductsView,
)

urlpatterns = [
    path("dashboard/", DashboardView.as_view(), name="reports-dashboard"),
    path("daily-sales/", DailySalesView.as_view(), name="reports-daily-sales"),
    path(
        "category-distribution/",
        CategoryDistributionView.as_view(),
        name="reports-category-distribution",
    ),
    path("summary/", SummaryView.as_view(), name="reports-summary"),
    path("top-products/", TopProductsView.as_view(), name="reports-top-products"),
    path(
        "expenses-by-category/",
        ExpensesByCategoryView.as_view(),
        name="reports-expenses-by-category",
    ),
    path(
        "financial-evolution/",
        FinancialEvolutionView.as_view(),
        name="reports-financial-evolution",
    ),
]
