# reports/tests/test_period_report.py

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounting.models import LedgerEntry
from accounting.services.ledger_service import record_entry
from products.models import Product
from reports.services.period_report import (
    ReportPeriodError,
    expenses_by_category,
    financial_evolution,
    period_summary,
    resolve_period,
    top_products,
)
from sales.models import Sale
from sales.services.sale_workflow import create_sale

User = get_user_model()


def _backdate_sale(sale, days):
    moment = timezone.now() - timedelta(days=days)
    Sale.objects.filter(pk=sale.pk).update(created_at=moment)
    LedgerEntry.objects.filter(related_sale=sale).update(created_at=moment)


def _backdate_entry(entry, days):
    LedgerEntry.objects.filter(pk=entry.pk).update(created_at=timezone.now() - timedelta(days=days))


class ReportFixtureMixin:
    def setUp(self):
        self.whey = Product.objects.create(
            name="Whey 900g",
            category=Product.Category.PROTEINS,
            price=Decimal("100.00"),
            stock=10,
            min_stock=2,
        )
        self.bar = Product.objects.create(
            name="Barra Proteica",
            category=Product.Category.BARS_AND_SNACKS,
            price=Decimal("8.00"),
            stock=3,
            min_stock=5,
        )
        self.casein = Product.objects.create(
            name="Caseína 900g",
            category=Product.Category.PROTEINS,
            price=Decimal("150.00"),
            stock=0,
            min_stock=1,
        )

        create_sale(cart=[{"product_id": str(self.whey.id), "quantity": 2}], payment_method="pix")
        create_sale(
            cart=[
                {"product_id": str(self.bar.id), "quantity": 1},
                {"product_id": str(self.whey.id), "quantity": 1},
            ],
            payment_method="cash",
        )
        old_sale = create_sale(
            cart=[{"product_id": str(self.whey.id), "quantity": 1}],
            payment_method="credit",
        )
        _backdate_sale(old_sale, days=40)

        record_entry(entry_type="expense", category="Aluguel", amount="50")
        record_entry(entry_type="expense", category="Energia", amount="30")
        old_rent = record_entry(entry_type="expense", category="Aluguel", amount="70")
        _backdate_entry(old_rent, days=40)


class ResolvePeriodTests(TestCase):
    def test_presets(self):
        for key, days in (("7d", 7), ("30d", 30), ("90d", 90)):
            with self.subTest(period=key):
                period = resolve_period(key)
                self.assertEqual(period.days, days)
                self.assertIsNotNone(period.start)

    def test_default_is_thirty_days(self):
        self.assertEqual(resolve_period(None).days, 30)

    def test_all_has_no_window(self):
        period = resolve_period("all")
        self.assertIsNone(period.days)
        self.assertIsNone(period.start)

    def test_custom_days_win_over_months(self):
        self.assertEqual(resolve_period("custom", days="10", months="2").days, 10)
        self.assertEqual(resolve_period("custom", months="2").days, 60)

    def test_custom_without_values_is_unbounded(self):
        self.assertIsNone(resolve_period("custom").start)

    def test_rejects_bad_values(self):
        cases = [
            ("1y", {}),
            ("custom", {"days": "0"}),
            ("custom", {"months": "abc"}),
            ("custom", {"days": "99999"}),
        ]
        for key, extra in cases:
            with self.subTest(period=key, **extra):
                with self.assertRaises(ReportPeriodError):
                    resolve_period(key, **extra)


class PeriodReportServiceTests(ReportFixtureMixin, TestCase):
    """
    GUARANTEES:
    - Money figures only count rows inside the window
    - Average ticket = completed sales total / completed sales count
    - Low stock excludes products that are out of stock
    """

    def test_summary_for_thirty_days(self):
        summary = period_summary(resolve_period("30d"))

        self.assertEqual(summary["total_revenue"], Decimal("308.00"))
        self.assertEqual(summary["total_expenses"], Decimal("80.00"))
        self.assertEqual(summary["net_profit"], Decimal("228.00"))
        self.assertEqual(summary["total_sales"], 2)
        self.assertEqual(summary["average_ticket"], Decimal("154.00"))

    def test_summary_for_all_time(self):
        summary = period_summary(resolve_period("all"))

        self.assertEqual(summary["total_revenue"], Decimal("408.00"))
        self.assertEqual(summary["total_expenses"], Decimal("150.00"))
        self.assertEqual(summary["total_sales"], 3)
        self.assertEqual(summary["average_ticket"], Decimal("136.00"))

    def test_stock_counts_are_split(self):
        summary = period_summary(resolve_period("7d"))

        self.assertEqual(summary["low_stock_count"], 1)
        self.assertEqual(summary["out_of_stock_count"], 1)
        self.assertEqual(summary["total_products"], 3)

    def test_average_ticket_without_sales(self):
        Sale.objects.update(created_at=timezone.now() - timedelta(days=100))

        summary = period_summary(resolve_period("7d"))
        self.assertEqual(summary["total_sales"], 0)
        self.assertEqual(summary["average_ticket"], Decimal("0.00"))

    def test_top_products(self):
        rows = top_products(resolve_period("30d"))

        self.assertEqual([row["name"] for row in rows], ["Whey 900g", "Barra Proteica"])
        self.assertEqual(rows[0]["units"], 3)
        self.assertEqual(rows[0]["revenue"], Decimal("300.00"))
        self.assertEqual(rows[1]["revenue"], Decimal("8.00"))

        everything = top_products(resolve_period("all"), limit=1)
        self.assertEqual(len(everything), 1)
        self.assertEqual(everything[0]["units"], 4)

    def test_top_products_use_charged_price(self):
        Product.objects.filter(pk=self.whey.pk).update(price=Decimal("999.00"))

        self.assertEqual(top_products(resolve_period("30d"))[0]["revenue"], Decimal("300.00"))

    def test_expenses_by_category(self):
        self.assertEqual(
            expenses_by_category(resolve_period("30d")),
            [
                {"name": "Aluguel", "value": Decimal("50.00")},
                {"name": "Energia", "value": Decimal("30.00")},
            ],
        )
        self.assertEqual(
            expenses_by_category(resolve_period("all"))[0],
            {"name": "Aluguel", "value": Decimal("120.00")},
        )

    def test_financial_evolution_is_zero_filled(self):
        rows = financial_evolution(resolve_period("7d"))

        self.assertEqual(len(rows), 7)
        self.assertEqual(rows[-1]["date"], timezone.localdate())
        self.assertEqual(rows[-1]["income"], Decimal("308.00"))
        self.assertEqual(rows[-1]["expense"], Decimal("80.00"))
        self.assertEqual(rows[-1]["profit"], Decimal("228.00"))
        self.assertTrue(all(row["profit"] == Decimal("0.00") for row in rows[:-1]))

    def test_financial_evolution_for_all_time_charts_thirty_days(self):
        self.assertEqual(len(financial_evolution(resolve_period("all"))), 30)


class PeriodReportApiTests(ReportFixtureMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.user = User.objects.create_user(username="gerente", password="pass")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def test_summary_defaults_to_thirty_days(self):
        res = self.client.get("/api/reports/summary/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["period"], "30d")
        self.assertEqual(res.data["total_revenue"], "308.00")
        self.assertEqual(res.data["average_ticket"], "154.00")
        self.assertEqual(res.data["out_of_stock_count"], 1)

    def test_summary_custom_months(self):
        res = self.client.get("/api/reports/summary/", {"period": "custom", "months": 2})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["days"], 60)
        self.assertEqual(res.data["total_sales"], 3)

    def test_invalid_period(self):
        res = self.client.get("/api/reports/summary/", {"period": "ontem"})

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_PERIOD")

    def test_top_products(self):
        res = self.client.get("/api/reports/top-products/", {"period": "all", "limit": 1})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data["results"]), 1)
        self.assertEqual(res.data["results"][0]["revenue"], "400.00")

    def test_top_products_rejects_bad_limit(self):
        res = self.client.get("/api/reports/top-products/", {"limit": "0"})

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_LIMIT")

    def test_expenses_by_category(self):
        res = self.client.get("/api/reports/expenses-by-category/", {"period": "7d"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(
            res.data["results"],
            [{"name": "Aluguel", "value": "50.00"}, {"name": "Energia", "value": "30.00"}],
        )

    def test_financial_evolution(self):
        res = self.client.get("/api/reports/financial-evolution/", {"period": "7d"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data["results"]), 7)
        self.assertEqual(res.data["results"][-1]["profit"], "228.00")
