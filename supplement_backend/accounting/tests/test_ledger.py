# accounting/tests/test_ledger.py

from datetime import date
from decimal import Decimal
import uuid

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models import LedgerEntry
from accounting.services.exceptions import (
    DuplicatePostingError,
    InvalidLedgerEntryError,
    LedgerEntryLinkedToSaleError,
    LedgerEntryNotFoundError,
)
from accounting.services.ledger_service import delete_entry, record_entry, set_paid_status
from accounting.services.posting import post_sale_income
from products.models import Product
from sales.services.sale_workflow import create_sale

User = get_user_model()


class LedgerServiceTests(TestCase):
    """
    Cash book rules.

    GUARANTEES:
    - Amount is always positive
    - Income is recorded paid, expenses start unpaid
    - Sale-linked entries are never deleted directly
    """

    def setUp(self):
        product = Product.objects.create(name="Whey 900g", price=Decimal("120.00"), stock=5)
        self.sale = create_sale(
            cart=[{"product_id": str(product.id), "quantity": 1}],
            payment_method="cash",
        )
        self.sale_entry = LedgerEntry.objects.get(related_sale=self.sale)

    def test_record_expense(self):
        entry = record_entry(
            entry_type="expense",
            category=LedgerEntry.ExpenseCategory.RENT,
            amount="2500",
            due_date=date(2026, 11, 5),
        )

        self.assertEqual(entry.amount, Decimal("2500.00"))
        self.assertFalse(entry.paid)
        self.assertEqual(entry.description, "Sem descrição")
        self.assertIsNone(entry.related_sale)

    def test_record_income_is_paid(self):
        entry = record_entry(entry_type="INCOME", category="Outros", amount=Decimal("10"), description="Frete")

        self.assertEqual(entry.entry_type, LedgerEntry.TYPE_INCOME)
        self.assertTrue(entry.paid)

    def test_record_rejects_invalid_payloads(self):
        for kwargs in (
            {"entry_type": "transfer", "category": "Outros", "amount": "1"},
            {"entry_type": "expense", "category": " ", "amount": "1"},
            {"entry_type": "expense", "category": "Outros", "amount": "0"},
            {"entry_type": "expense", "category": "Outros", "amount": "-5"},
            {"entry_type": "expense", "category": "Outros", "amount": "abc"},
        ):
            with self.subTest(**kwargs):
                with self.assertRaises(InvalidLedgerEntryError):
                    record_entry(**kwargs)

    def test_set_paid_status(self):
        entry = record_entry(entry_type="expense", category="Energia", amount="300")

        self.assertTrue(set_paid_status(entry_id=entry.id, paid=True).paid)
        self.assertFalse(set_paid_status(entry_id=entry.id, paid=False).paid)

        with self.assertRaises(InvalidLedgerEntryError):
            set_paid_status(entry_id=self.sale_entry.id, paid=False)

    def test_delete_manual_entry(self):
        entry = record_entry(entry_type="expense", category="Marketing", amount="80")

        delete_entry(entry_id=entry.id)
        self.assertFalse(LedgerEntry.objects.filter(pk=entry.pk).exists())

        with self.assertRaises(LedgerEntryNotFoundError):
            delete_entry(entry_id=entry.id)

    def test_delete_sale_linked_entry_is_refused(self):
        with self.assertRaises(LedgerEntryLinkedToSaleError):
            delete_entry(entry_id=self.sale_entry.id)

        with self.assertRaises(ValidationError):
            self.sale_entry.delete()

        self.assertTrue(LedgerEntry.objects.filter(pk=self.sale_entry.pk).exists())

    def test_posting_is_idempotent(self):
        with self.assertRaises(DuplicatePostingError):
            post_sale_income(sale=self.sale)

        self.assertEqual(LedgerEntry.objects.filter(related_sale=self.sale).count(), 1)


class LedgerApiTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="financeiro", password="pass")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        product = Product.objects.create(name="Creatina", price=Decimal("80.00"), stock=5)
        self.sale = create_sale(
            cart=[{"product_id": str(product.id), "quantity": 2}],
            payment_method="credit",
        )

    def test_create_and_list(self):
        res = self.client.post(
            "/api/accounting/entries/",
            {"entry_type": "expense", "category": "Fornecedores", "amount": "450.00", "due_date": "2026-11-10"},
            format="json",
        )

        self.assertEqual(res.status_code, 201)
        self.assertFalse(res.data["paid"])
        self.assertFalse(res.data["is_sale_linked"])

        listing = self.client.get("/api/accounting/entries/", {"entry_type": "expense"})
        self.assertEqual(listing.data["count"], 1)

    def test_create_rejects_non_positive_amount(self):
        res = self.client.post(
            "/api/accounting/entries/",
            {"entry_type": "expense", "category": "Outros", "amount": "0"},
            format="json",
        )

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_LEDGER_ENTRY")

    def test_delete_sale_linked_entry_is_409(self):
        entry = LedgerEntry.objects.get(related_sale=self.sale)

        res = self.client.delete(f"/api/accounting/entries/{entry.id}/")

        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["error"]["code"], "LEDGER_ENTRY_LINKED_TO_SALE")
        self.assertTrue(LedgerEntry.objects.filter(pk=entry.pk).exists())

    def test_delete_manual_entry(self):
        entry = record_entry(entry_type="expense", category="Aluguel", amount="1000")

        res = self.client.delete(f"/api/accounting/entries/{entry.id}/")
        self.assertEqual(res.status_code, 204)

    def test_mark_paid(self):
        entry = record_entry(entry_type="expense", category="Aluguel", amount="1000")

        res = self.client.post(f"/api/accounting/entries/{entry.id}/mark-paid/", {"paid": True}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["paid"])

    def test_unknown_entry_is_404(self):
        res = self.client.delete(f"/api/accounting/entries/{uuid.uuid4()}/")
        self.assertEqual(res.status_code, 404)
