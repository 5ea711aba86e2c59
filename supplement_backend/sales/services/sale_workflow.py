# sales/services/sale_workflow.py

"""
SALE WORKFLOW ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- create_sale(): turn a POS cart into a committed Sale
    validate cart -> reserve stock -> price server-side -> persist sale + items
    -> decrement stock -> post income to the cash ledger
- cancel_sale(): the exact inverse
    restore stock -> retract ledger entry -> delete items -> delete sale

Hard rules:
- Quantities are integer units; lines for the same product are merged.
- Money is computed server-side from the product's current price; the
  client never supplies prices.
- Cart/payment validation happens before any database access.
- Everything after validation runs in ONE database transaction:
  sale rows, stock decrements, stock movements and the ledger entry commit
  together or roll back together.
- Products are locked in primary-key order so concurrent checkouts touching
  the same products cannot deadlock; decrements are conditional updates, so
  stock can never go below zero.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from accounting.services.exceptions import AccountingServiceError
from accounting.services.posting import post_sale_income, retract_sale_income
from customers.models import Customer
from customers.services.customer_service import CustomerNotFoundError, CustomerServiceError
from products.services.exceptions import (
    InventoryError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from products.services.stock import (
    decrement_stock,
    reserve_stock,
    restore_stock,
    sale_reference,
    to_int_qty,
)
from sales.models import Sale, SaleItem
from sales.services.exceptions import (
    EmptyCartError,
    InvalidCartError,
    InvalidPaymentMethodError,
    SaleNotFoundError,
    StoreUnavailableError,
)
from sales.services.sale_lifecycle import validate_transition

logger = logging.getLogger(__name__)

DOMAIN_REJECTIONS = (InventoryError, CustomerServiceError, AccountingServiceError)

TWOPLACES = Decimal("0.01")


@dataclass(frozen=True)
class CartLine:
    """One product + quantity pair submitted by the POS."""

    product_id: str
    quantity: int


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _product_key(raw) -> str:
    try:
        return str(uuid.UUID(str(raw).strip()))
    except (TypeError, ValueError, AttributeError):
        raise ProductNotFoundError(raw)


def normalize_cart(cart) -> list[CartLine]:
    """
    Accepts CartLine objects or {"product_id", "quantity"} mappings.

    Returns one CartLine per distinct product (first-seen order) with the
    quantities summed. Raises EmptyCartError / InvalidCartError /
    ProductNotFoundError (malformed id) without touching the database.
    """
    if not cart:
        raise EmptyCartError()

    merged: dict[str, int] = {}

    for idx, line in enumerate(cart):
        if isinstance(line, CartLine):
            raw_product_id, raw_qty = line.product_id, line.quantity
        elif isinstance(line, dict):
            raw_product_id, raw_qty = line.get("product_id"), line.get("quantity")
        else:
            raise InvalidCartError(f"Invalid cart line at index {idx}.")

        if raw_product_id in (None, ""):
            raise InvalidCartError(f"Cart line {idx} has no product_id.")

        try:
            qty = to_int_qty(raw_qty)
        except InvalidQuantityError as exc:
            raise InvalidCartError(f"Invalid quantity at line {idx}: {exc.message}") from exc

        key = _product_key(raw_product_id)
        merged[key] = merged.get(key, 0) + qty

    return [CartLine(product_id=pid, quantity=qty) for pid, qty in merged.items()]


def normalize_payment_method(method) -> str:
    m = str(method or "").strip().lower()
    if m not in Sale.PAYMENT_METHODS:
        raise InvalidPaymentMethodError()
    return m


def _resolve_customer(customer_id) -> Customer | None:
    if customer_id in (None, ""):
        return None

    try:
        customer = Customer.objects.filter(pk=customer_id).first()
    except ValidationError:
        customer = None

    if customer is None:
        raise CustomerNotFoundError(f"Customer not found: {customer_id}")
    return customer


def _commit_sale(*, lines: list[CartLine], payment_method: str, customer_id, notes: str) -> Sale:
    # Reserve: lock + check every distinct product before writing anything.
    products = {}
    for line in sorted(lines, key=lambda cart_line: cart_line.product_id):
        products[line.product_id] = reserve_stock(
            product_id=line.product_id,
            quantity=line.quantity,
        )

    total = _money(
        sum(
            (_money(products[line.product_id].price) * line.quantity for line in lines),
            Decimal("0.00"),
        )
    )

    customer = _resolve_customer(customer_id)

    sale = Sale.objects.create(
        total=total,
        payment_method=payment_method,
        status=Sale.STATUS_COMPLETED,
        customer=customer,
        customer_name=customer.name if customer else "",
        notes=(notes or "").strip(),
    )

    for line in lines:
        product = products[line.product_id]
        SaleItem.objects.create(
            sale=sale,
            product=product,
            product_name=product.name,
            quantity=line.quantity,
            unit_price=_money(product.price),
        )

    reference = sale_reference(sale.id)
    for line in lines:
        decrement_stock(
            product_id=line.product_id,
            quantity=line.quantity,
            reference=reference,
        )

    post_sale_income(sale=sale)

    return Sale.objects.select_related("customer").prefetch_related("items").get(pk=sale.pk)


def create_sale(*, cart, payment_method, customer_id=None, notes: str = "") -> Sale:
    """
    Commit a sale for `cart` and return it with its items.

    Raises (nothing persisted in every case):
    - EmptyCartError, InvalidCartError, InvalidPaymentMethodError
    - ProductNotFoundError, InsufficientStockError
    - CustomerNotFoundError
    - StoreUnavailableError (database failure; transaction rolled back)
    """
    lines = normalize_cart(cart)
    method = normalize_payment_method(payment_method)

    try:
        with transaction.atomic():
            sale = _commit_sale(
                lines=lines,
                payment_method=method,
                customer_id=customer_id,
                notes=notes,
            )
    except DOMAIN_REJECTIONS as exc:
        logger.warning("Sale rejected (%s): %s", exc.code, exc.message)
        raise
    except DatabaseError as exc:
        logger.exception("Sale rolled back: database failure while committing cart")
        raise StoreUnavailableError() from exc

    logger.info(
        "Sale %s committed: %s line(s), total=%s, payment=%s",
        sale.id,
        len(lines),
        sale.total,
        sale.payment_method,
    )
    return sale


def _lock_sale(sale_id) -> Sale:
    try:
        sale = Sale.objects.select_for_update().filter(pk=sale_id).first()
    except ValidationError:
        sale = None

    if sale is None:
        raise SaleNotFoundError(f"Sale not found: {sale_id}")
    return sale


def cancel_sale(*, sale_id) -> bool:
    """
    Reverse a committed sale completely and purge it.

    Returns True on success. Raises SaleNotFoundError when the sale (or its
    items) does not exist, InvalidSaleTransitionError when the sale is not in
    a cancellable state, StoreUnavailableError on database failure. Any
    failure rolls back every step, including stock restoration.
    """
    try:
        with transaction.atomic():
            sale = _lock_sale(sale_id)

            items = list(sale.items.all())
            if not items:
                raise SaleNotFoundError(f"Sale {sale_id} has no items.")

            validate_transition(sale=sale, target_status=Sale.STATUS_CANCELLED)

            quantities = defaultdict(int)
            for item in items:
                quantities[item.product_id] += int(item.quantity)

            reference = sale_reference(sale.id)
            for product_id in sorted(quantities, key=str):
                restore_stock(
                    product_id=product_id,
                    quantity=quantities[product_id],
                    reference=reference,
                )

            retract_sale_income(sale=sale)

            sale.items.all().delete()
            deleted, _ = Sale.objects.filter(pk=sale.pk).delete()
            if not deleted:
                raise StoreUnavailableError(f"Sale {sale_id} could not be deleted.")

    except DatabaseError as exc:
        logger.exception("Sale %s cancellation rolled back: database failure", sale_id)
        raise StoreUnavailableError() from exc

    logger.info("Sale %s cancelled: %s line(s) restored to stock", sale_id, len(items))
    return True
