# products/tests/test_stock.py

from decimal import Decimal
import uuid

from django.core.exceptions import ValidationError
from django.test import TestCase

from products.models import Product, StockMovement
from products.services.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from products.services.stock import (
    adjust_stock,
    decrement_stock,
    reserve_stock,
    restore_stock,
    to_int_qty,
)


class StockServiceTests(TestCase):
    """
    Inventory ledger.

    GUARANTEES:
    - Decrements never drive stock below zero
    - Restores have no upper bound
    - Every mutation leaves an immutable StockMovement
    """

    def setUp(self):
        self.product = Product.objects.create(
            name="Ômega 3 120 caps",
            category=Product.Category.VITAMINS,
            price=Decimal("59.90"),
            stock=5,
            min_stock=2,
        )

    def test_to_int_qty(self):
        self.assertEqual(to_int_qty(3), 3)
        self.assertEqual(to_int_qty(" 4 "), 4)
        for bad in (0, -2, 1.5, "1.5", "", None, True):
            with self.subTest(value=bad):
                with self.assertRaises(InvalidQuantityError):
                    to_int_qty(bad)

    def test_reserve_does_not_mutate(self):
        product = reserve_stock(product_id=self.product.id, quantity=5)

        self.assertEqual(product.pk, self.product.pk)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 5)
        self.assertEqual(StockMovement.objects.count(), 0)

    def test_reserve_insufficient(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            reserve_stock(product_id=self.product.id, quantity=6)

        self.assertEqual(ctx.exception.product_name, "Ômega 3 120 caps")

    def test_reserve_unknown_product(self):
        with self.assertRaises(ProductNotFoundError):
            reserve_stock(product_id=uuid.uuid4(), quantity=1)

    def test_decrement_is_conditional(self):
        self.assertEqual(decrement_stock(product_id=self.product.id, quantity=5, reference="SALE:x"), 0)

        with self.assertRaises(InsufficientStockError):
            decrement_stock(product_id=self.product.id, quantity=1, reference="SALE:y")

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 0)

    def test_decrement_records_movement(self):
        decrement_stock(product_id=self.product.id, quantity=2, reference="SALE:abc")

        movement = StockMovement.objects.get(product=self.product)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.OUT)
        self.assertEqual(movement.reason, StockMovement.Reason.SALE)
        self.assertEqual(movement.quantity, 2)
        self.assertEqual(movement.stock_after, 3)
        self.assertEqual(movement.reference, "SALE:abc")

    def test_restore_has_no_upper_bound(self):
        self.assertEqual(restore_stock(product_id=self.product.id, quantity=50, reference="SALE:z"), 55)

    def test_restore_missing_product_is_skipped(self):
        with self.assertLogs("products.services.stock", level="WARNING"):
            self.assertIsNone(restore_stock(product_id=uuid.uuid4(), quantity=1, reference="SALE:z"))
            self.assertIsNone(restore_stock(product_id=None, quantity=1, reference="SALE:z"))

    def test_adjust_stock(self):
        self.assertEqual(adjust_stock(product_id=self.product.id, quantity_delta=10, note="Compra"), 15)
        self.assertEqual(adjust_stock(product_id=self.product.id, quantity_delta=-15, note="Vencido"), 0)

        with self.assertRaises(InsufficientStockError):
            adjust_stock(product_id=self.product.id, quantity_delta=-1)

        with self.assertRaises(InvalidQuantityError):
            adjust_stock(product_id=self.product.id, quantity_delta=0)

        with self.assertRaises(ProductNotFoundError):
            adjust_stock(product_id=uuid.uuid4(), quantity_delta=1)

        self.assertEqual(
            StockMovement.objects.filter(reason=StockMovement.Reason.ADJUSTMENT).count(),
            2,
        )

    def test_movements_are_immutable(self):
        decrement_stock(product_id=self.product.id, quantity=1, reference="SALE:abc")
        movement = StockMovement.objects.get()

        movement.quantity = 99
        with self.assertRaises(ValidationError):
            movement.save()

        with self.assertRaises(ValidationError):
            movement.delete()
