# sales/tests/test_sale_workflow.py

from decimal import Decimal
from unittest import mock
import uuid

from django.db import DatabaseError
from django.test import TestCase

from accounting.models import LedgerEntry
from accounting.services.exceptions import LedgerEntryLinkedToSaleError
from accounting.services.ledger_service import delete_entry
from customers.models import Customer
from customers.services.customer_service import CustomerNotFoundError
from products.models import Product, StockMovement
from products.services.exceptions import InsufficientStockError, ProductNotFoundError
from sales.models import Sale, SaleItem
from sales.services.exceptions import (
    EmptyCartError,
    InvalidCartError,
    InvalidPaymentMethodError,
    SaleNotFoundError,
    StoreUnavailableError,
)
from sales.services.sale_lifecycle import InvalidSaleTransitionError
from sales.services.sale_workflow import CartLine, cancel_sale, create_sale


def _product(name="Whey Protein 900g", price="50.00", stock=10, **kwargs):
    return Product.objects.create(
        name=name,
        category=Product.Category.PROTEINS,
        price=Decimal(price),
        cost=Decimal("20.00"),
        stock=stock,
        min_stock=2,
        **kwargs,
    )


def _write_counts():
    return (
        Sale.objects.count(),
        SaleItem.objects.count(),
        LedgerEntry.objects.count(),
        StockMovement.objects.count(),
    )


class CreateSaleTests(TestCase):
    """
    Checkout workflow.

    GUARANTEES:
    - Each distinct product is decremented once by the summed quantity
    - Totals come from current product prices
    - Any failing line rejects the whole cart with no writes
    - One paid income entry per sale
    """

    def setUp(self):
        self.whey = _product()
        self.creatine = _product(name="Creatina 300g", price="89.90", stock=5)

    def test_example_scenario_sale_then_cancel(self):
        sale = create_sale(
            cart=[CartLine(product_id=str(self.whey.id), quantity=3)],
            payment_method="pix",
        )

        self.assertEqual(sale.total, Decimal("150.00"))
        self.whey.refresh_from_db()
        self.assertEqual(self.whey.stock, 7)

        entry = LedgerEntry.objects.get(related_sale=sale)
        self.assertEqual(entry.entry_type, LedgerEntry.TYPE_INCOME)
        self.assertEqual(entry.amount, Decimal("150.00"))
        self.assertTrue(entry.paid)

        self.assertTrue(cancel_sale(sale_id=sale.id))

        self.whey.refresh_from_db()
        self.assertEqual(self.whey.stock, 10)
        self.assertFalse(Sale.objects.filter(pk=sale.id).exists())
        self.assertFalse(SaleItem.objects.filter(sale_id=sale.id).exists())
        self.assertFalse(LedgerEntry.objects.filter(description__contains=sale.short_id).exists())

    def test_duplicate_lines_for_same_product_decrement_once_by_sum(self):
        sale = create_sale(
            cart=[
                {"product_id": str(self.whey.id), "quantity": 2},
                {"product_id": str(self.creatine.id), "quantity": 1},
                {"product_id": str(self.whey.id), "quantity": 3},
            ],
            payment_method="cash",
        )

        self.whey.refresh_from_db()
        self.assertEqual(self.whey.stock, 5)
        self.assertEqual(sale.items.count(), 2)
        self.assertEqual(sale.items.get(product=self.whey).quantity, 5)
        self.assertEqual(
            StockMovement.objects.filter(product=self.whey, reason=StockMovement.Reason.SALE).count(),
            1,
        )

    def test_total_uses_current_product_price(self):
        sale = create_sale(
            cart=[
                {"product_id": str(self.whey.id), "quantity": 2, "unit_price": "0.01"},
                {"product_id": str(self.creatine.id), "quantity": 1},
            ],
            payment_method="debit",
        )

        self.assertEqual(sale.total, Decimal("189.90"))
        self.assertEqual(
            sale.total,
            sum((item.unit_price * item.quantity for item in sale.items.all()), Decimal("0.00")),
        )

    def test_items_snapshot_name_and_price(self):
        sale = create_sale(
            cart=[{"product_id": str(self.whey.id), "quantity": 1}],
            payment_method="cash",
        )

        Product.objects.filter(pk=self.whey.pk).update(name="Renamed", price=Decimal("99.00"))

        item = SaleItem.objects.get(sale=sale)
        self.assertEqual(item.product_name, "Whey Protein 900g")
        self.assertEqual(item.unit_price, Decimal("50.00"))
        self.assertEqual(item.subtotal, Decimal("50.00"))

    def test_insufficient_stock_rejects_whole_cart(self):
        before = _write_counts()

        with self.assertRaises(InsufficientStockError) as ctx:
            create_sale(
                cart=[
                    {"product_id": str(self.whey.id), "quantity": 2},
                    {"product_id": str(self.creatine.id), "quantity": 6},
                ],
                payment_method="cash",
            )

        self.assertEqual(ctx.exception.product_name, "Creatina 300g")
        self.assertEqual(ctx.exception.available, 5)
        self.assertEqual(ctx.exception.requested, 6)

        self.whey.refresh_from_db()
        self.creatine.refresh_from_db()
        self.assertEqual(self.whey.stock, 10)
        self.assertEqual(self.creatine.stock, 5)
        self.assertEqual(_write_counts(), before)

    def test_merged_quantity_exceeding_stock_is_rejected(self):
        with self.assertRaises(InsufficientStockError):
            create_sale(
                cart=[
                    {"product_id": str(self.creatine.id), "quantity": 3},
                    {"product_id": str(self.creatine.id), "quantity": 3},
                ],
                payment_method="cash",
            )

        self.creatine.refresh_from_db()
        self.assertEqual(self.creatine.stock, 5)

    def test_empty_cart_is_rejected_without_writes(self):
        before = _write_counts()

        with self.assertRaises(EmptyCartError):
            create_sale(cart=[], payment_method="cash")

        self.assertEqual(_write_counts(), before)

    def test_invalid_quantity_is_rejected(self):
        for bad in (0, -1, "2.5", True, None):
            with self.subTest(quantity=bad):
                with self.assertRaises(InvalidCartError):
                    create_sale(
                        cart=[{"product_id": str(self.whey.id), "quantity": bad}],
                        payment_method="cash",
                    )

    def test_invalid_payment_method_is_rejected(self):
        with self.assertRaises(InvalidPaymentMethodError):
            create_sale(
                cart=[{"product_id": str(self.whey.id), "quantity": 1}],
                payment_method="boleto",
            )

        self.assertEqual(Sale.objects.count(), 0)

    def test_unknown_product_is_rejected(self):
        with self.assertRaises(ProductNotFoundError):
            create_sale(
                cart=[{"product_id": str(uuid.uuid4()), "quantity": 1}],
                payment_method="cash",
            )

        with self.assertRaises(ProductNotFoundError):
            create_sale(
                cart=[{"product_id": "not-a-uuid", "quantity": 1}],
                payment_method="cash",
            )

    def test_customer_name_is_snapshotted(self):
        customer = Customer.objects.create(name="Ana Souza", phone="(11) 98765-4321")

        sale = create_sale(
            cart=[{"product_id": str(self.whey.id), "quantity": 1}],
            payment_method="credit",
            customer_id=str(customer.id),
        )

        customer.name = "Ana S. Lima"
        customer.save()

        sale.refresh_from_db()
        self.assertEqual(sale.customer_id, customer.id)
        self.assertEqual(sale.customer_name, "Ana Souza")

    def test_unknown_customer_is_rejected_without_writes(self):
        before = _write_counts()

        with self.assertRaises(CustomerNotFoundError):
            create_sale(
                cart=[{"product_id": str(self.whey.id), "quantity": 1}],
                payment_method="cash",
                customer_id=str(uuid.uuid4()),
            )

        self.whey.refresh_from_db()
        self.assertEqual(self.whey.stock, 10)
        self.assertEqual(_write_counts(), before)

    def test_ledger_failure_rolls_back_every_write(self):
        before = _write_counts()

        with mock.patch(
            "sales.services.sale_workflow.post_sale_income",
            side_effect=DatabaseError("connection lost"),
        ):
            with self.assertLogs("sales.services.sale_workflow", level="ERROR"):
                with self.assertRaises(StoreUnavailableError):
                    create_sale(
                        cart=[{"product_id": str(self.whey.id), "quantity": 4}],
                        payment_method="cash",
                    )

        self.whey.refresh_from_db()
        self.assertEqual(self.whey.stock, 10)
        self.assertEqual(_write_counts(), before)

    def test_income_entry_describes_sale(self):
        sale = create_sale(
            cart=[{"product_id": str(self.whey.id), "quantity": 1}],
            payment_method="pix",
        )

        entry = LedgerEntry.objects.get(related_sale=sale)
        self.assertEqual(entry.category, "Vendas")
        self.assertEqual(entry.description, f"Venda #{sale.short_id} - PIX")
        self.assertEqual(entry.payment_method, "pix")


class CancelSaleTests(TestCase):
    """
    Cancellation is the exact inverse of checkout.
    """

    def setUp(self):
        self.p1 = _product(name="Pré-Treino 300g", price="120.00", stock=8)
        self.p2 = _product(name="Barra de Proteína", price="9.50", stock=30)
        self.sale = create_sale(
            cart=[
                {"product_id": str(self.p1.id), "quantity": 2},
                {"product_id": str(self.p2.id), "quantity": 1},
            ],
            payment_method="cash",
        )

    def test_cancel_restores_stock_and_purges_sale(self):
        self.assertTrue(cancel_sale(sale_id=self.sale.id))

        self.p1.refresh_from_db()
        self.p2.refresh_from_db()
        self.assertEqual(self.p1.stock, 8)
        self.assertEqual(self.p2.stock, 30)
        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(SaleItem.objects.count(), 0)
        self.assertEqual(LedgerEntry.objects.count(), 0)

    def test_repeated_cancel_fails_with_sale_not_found(self):
        cancel_sale(sale_id=self.sale.id)

        with self.assertRaises(SaleNotFoundError):
            cancel_sale(sale_id=self.sale.id)

    def test_pending_sale_is_not_cancelled(self):
        Sale.objects.filter(pk=self.sale.pk).update(status=Sale.STATUS_PENDING)

        with self.assertRaises(InvalidSaleTransitionError):
            cancel_sale(sale_id=self.sale.id)

        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock, 6)
        self.assertTrue(Sale.objects.filter(pk=self.sale.pk).exists())
        self.assertEqual(LedgerEntry.objects.filter(related_sale=self.sale).count(), 1)

    def test_cancel_unknown_or_malformed_id(self):
        with self.assertRaises(SaleNotFoundError):
            cancel_sale(sale_id=uuid.uuid4())

        with self.assertRaises(SaleNotFoundError):
            cancel_sale(sale_id="garbage")

    def test_stock_audit_trail_survives_cancellation(self):
        cancel_sale(sale_id=self.sale.id)

        reference = f"SALE:{self.sale.id}"
        reasons = StockMovement.objects.filter(reference=reference, product=self.p1).values_list(
            "reason", flat=True
        )
        self.assertCountEqual(reasons, [StockMovement.Reason.SALE, StockMovement.Reason.SALE_CANCEL])

    def test_cancel_when_product_was_deleted(self):
        Product.objects.filter(pk=self.p2.pk).delete()

        self.assertTrue(cancel_sale(sale_id=self.sale.id))

        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock, 8)
        self.assertFalse(Sale.objects.filter(pk=self.sale.id).exists())

    def test_failure_during_cancel_rolls_back_stock_restore(self):
        with mock.patch(
            "sales.services.sale_workflow.retract_sale_income",
            side_effect=DatabaseError("connection lost"),
        ):
            with self.assertLogs("sales.services.sale_workflow", level="ERROR"):
                with self.assertRaises(StoreUnavailableError):
                    cancel_sale(sale_id=self.sale.id)

        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock, 6)
        self.assertTrue(Sale.objects.filter(pk=self.sale.id).exists())
        self.assertEqual(LedgerEntry.objects.filter(related_sale=self.sale).count(), 1)

    def test_sale_linked_entry_cannot_be_deleted_directly(self):
        entry = LedgerEntry.objects.get(related_sale=self.sale)

        with self.assertRaises(LedgerEntryLinkedToSaleError):
            delete_entry(entry_id=entry.id)

        self.assertTrue(LedgerEntry.objects.filter(pk=entry.pk).exists())
