# sales/tests/test_reconciliation.py

from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from accounting.models import LedgerEntry
from products.models import Product
from sales.models import Sale
from sales.services.reconciliation import reconcile_sales
from sales.services.sale_workflow import create_sale


class ReconciliationTests(TestCase):
    def setUp(self):
        self.product = Product.objects.create(
            name="Glutamina 300g",
            category=Product.Category.AMINO_ACIDS,
            price=Decimal("70.00"),
            stock=10,
        )
        self.sale = create_sale(
            cart=[{"product_id": str(self.product.id), "quantity": 1}],
            payment_method="debit",
        )

    def _orphan_sale(self):
        # Imported from the legacy store without its ledger entry.
        return Sale.objects.create(total=Decimal("35.00"), payment_method=Sale.PAYMENT_CASH)

    def test_clean_data_reports_no_problems(self):
        report = reconcile_sales()

        self.assertEqual(report.checked, 1)
        self.assertEqual(report.problems, 0)

    def test_detects_missing_entry_without_repairing(self):
        orphan = self._orphan_sale()

        report = reconcile_sales()

        self.assertEqual(report.missing_entries, [str(orphan.id)])
        self.assertEqual(report.problems, 1)
        self.assertFalse(LedgerEntry.objects.filter(related_sale=orphan).exists())

    def test_repair_posts_missing_entry(self):
        orphan = self._orphan_sale()

        report = reconcile_sales(repair=True)

        self.assertEqual(report.repaired, [str(orphan.id)])
        self.assertEqual(report.problems, 0)
        entry = LedgerEntry.objects.get(related_sale=orphan)
        self.assertEqual(entry.amount, Decimal("35.00"))
        self.assertTrue(entry.paid)

    def test_detects_amount_mismatch(self):
        LedgerEntry.objects.filter(related_sale=self.sale).update(amount=Decimal("1.00"))

        report = reconcile_sales(repair=True)

        self.assertEqual(len(report.amount_mismatches), 1)
        self.assertEqual(report.problems, 1)

    def test_command_output(self):
        self._orphan_sale()
        out, err = StringIO(), StringIO()

        call_command("reconcile_sales", "--repair", stdout=out, stderr=err)

        self.assertIn("Repaired: 1", out.getvalue())
        self.assertIn("RECONCILIATION PASSED", out.getvalue())

    def test_command_strict_exits_non_zero(self):
        self._orphan_sale()

        with self.assertRaises(SystemExit):
            call_command("reconcile_sales", "--strict", stdout=StringIO(), stderr=StringIO())
