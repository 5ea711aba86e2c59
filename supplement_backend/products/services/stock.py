# products/services/stock.py

"""
STOCK SERVICE (INVENTORY LEDGER)

Purpose:
- Authoritative per-product stock mutations for the sale workflow.
- reserve_stock():   locked read + sufficiency check, no mutation.
- decrement_stock(): conditional UPDATE (stock >= qty) so stock never goes negative,
                     even if two checkouts race past their reserve checks.
- restore_stock():   unconditional increment (cancellation), no upper bound.
- adjust_stock():    manual restock / correction with the same guarantees.

Rules:
- Quantities are whole positive units (bools and fractions rejected).
- Every mutation appends an immutable StockMovement row.
- Callers that need all-or-nothing behaviour wrap calls in transaction.atomic();
  each function is itself atomic so it is safe to call standalone.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from products.models import Product, StockMovement

from .exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
)

logger = logging.getLogger(__name__)


def to_int_qty(value, *, field_name: str = "quantity") -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are positive integer units in this system.
    """
    if value is None or value == "":
        raise InvalidQuantityError(f"{field_name} is required")

    if isinstance(value, bool):
        # bool is an int subclass in Python
        raise InvalidQuantityError(f"{field_name} must be a whole integer unit")

    if isinstance(value, int):
        qty = value
    elif isinstance(value, str) and value.strip().isdigit():
        qty = int(value.strip())
    else:
        raise InvalidQuantityError(f"{field_name} must be a whole integer unit")

    if qty <= 0:
        raise InvalidQuantityError(f"{field_name} must be at least 1")

    return qty


def sale_reference(sale_id) -> str:
    return f"SALE:{sale_id}"


def _current_stock(product_id) -> int:
    return int(Product.objects.filter(pk=product_id).values_list("stock", flat=True).get())


def _record_movement(*, product_id, movement_type, reason, quantity, stock_after, reference, note):
    StockMovement.objects.create(
        product_id=product_id,
        movement_type=movement_type,
        reason=reason,
        quantity=quantity,
        stock_after=stock_after,
        reference=reference or "",
        note=(note or "")[:255],
    )


@transaction.atomic
def reserve_stock(*, product_id, quantity) -> Product:
    """
    Check that `quantity` units of the product are available.

    The product row is locked (SELECT ... FOR UPDATE) for the rest of the
    enclosing transaction, so a following decrement_stock() sees the same stock.
    """
    qty = to_int_qty(quantity)

    try:
        product = Product.objects.select_for_update().get(pk=product_id)
    except (Product.DoesNotExist, ValidationError):
        raise ProductNotFoundError(product_id)

    if int(product.stock) < qty:
        raise InsufficientStockError(
            product_name=product.name,
            available=product.stock,
            requested=qty,
        )

    return product


def _decrement(*, product_id, qty, reason, reference, note) -> int:
    updated = Product.objects.filter(pk=product_id, stock__gte=qty).update(
        stock=F("stock") - qty,
        updated_at=timezone.now(),
    )

    if updated == 0:
        row = Product.objects.filter(pk=product_id).values("name", "stock").first()
        if row is None:
            raise ProductNotFoundError(product_id)
        raise InsufficientStockError(
            product_name=row["name"],
            available=row["stock"],
            requested=qty,
        )

    stock_after = _current_stock(product_id)
    _record_movement(
        product_id=product_id,
        movement_type=StockMovement.MovementType.OUT,
        reason=reason,
        quantity=qty,
        stock_after=stock_after,
        reference=reference,
        note=note,
    )
    return stock_after


def _increment(*, product_id, qty, reason, reference, note) -> int | None:
    updated = Product.objects.filter(pk=product_id).update(
        stock=F("stock") + qty,
        updated_at=timezone.now(),
    )

    if updated == 0:
        return None

    stock_after = _current_stock(product_id)
    _record_movement(
        product_id=product_id,
        movement_type=StockMovement.MovementType.IN,
        reason=reason,
        quantity=qty,
        stock_after=stock_after,
        reference=reference,
        note=note,
    )
    return stock_after


@transaction.atomic
def decrement_stock(*, product_id, quantity, reference: str = "", note: str = "") -> int:
    """
    Remove sold units from stock. Returns the new stock level.

    Raises InsufficientStockError when the conditional update matches no row
    (stock changed since reserve_stock), ProductNotFoundError when the product
    is gone.
    """
    qty = to_int_qty(quantity)
    return _decrement(
        product_id=product_id,
        qty=qty,
        reason=StockMovement.Reason.SALE,
        reference=reference,
        note=note,
    )


@transaction.atomic
def restore_stock(*, product_id, quantity, reference: str = "", note: str = "") -> int | None:
    """
    Put units back on the shelf (sale cancellation).

    Returns the new stock level, or None when the product no longer exists
    (deleted after the sale); that case is logged and skipped.
    """
    qty = to_int_qty(quantity)

    if product_id is None:
        logger.warning("Stock restore skipped: sale line has no product (%s)", reference)
        return None

    stock_after = _increment(
        product_id=product_id,
        qty=qty,
        reason=StockMovement.Reason.SALE_CANCEL,
        reference=reference,
        note=note,
    )

    if stock_after is None:
        logger.warning(
            "Stock restore skipped: product %s no longer exists (%s)",
            product_id,
            reference,
        )

    return stock_after


@transaction.atomic
def adjust_stock(*, product_id, quantity_delta, note: str = "") -> int:
    """
    Manual restock (+N) or correction (-N). Returns the new stock level.
    """
    if quantity_delta is None or quantity_delta == "" or isinstance(quantity_delta, bool):
        raise InvalidQuantityError("quantity_delta must be a non-zero integer")

    try:
        delta = int(quantity_delta)
    except (TypeError, ValueError):
        raise InvalidQuantityError("quantity_delta must be a non-zero integer")

    if delta == 0 or str(delta) != str(quantity_delta).strip():
        raise InvalidQuantityError("quantity_delta must be a non-zero integer")

    if delta < 0:
        stock_after = _decrement(
            product_id=product_id,
            qty=abs(delta),
            reason=StockMovement.Reason.ADJUSTMENT,
            reference="",
            note=note,
        )
    else:
        stock_after = _increment(
            product_id=product_id,
            qty=delta,
            reason=StockMovement.Reason.ADJUSTMENT,
            reference="",
            note=note,
        )
        if stock_after is None:
            raise ProductNotFoundError(product_id)

    logger.info("Stock adjusted for product %s by %+d -> %s", product_id, delta, stock_after)
    return stock_after


@transaction.atomic
def save_product_details(
    *,
    product: Product,
    changed_fields,
    new_stock=None,
    note: str = "Direct product edit",
) -> Product:
    """
    Persist edited master data of an existing product without writing stock.

    `product` may be stale (loaded before a concurrent sale); only the named
    non-stock columns are saved. A requested stock level is applied as an
    ADJUSTMENT against the locked row, so the movement records the real delta.
    """
    locked = Product.objects.select_for_update().filter(pk=product.pk).first()
    if locked is None:
        raise ProductNotFoundError(product.pk)

    fields = [name for name in changed_fields if name not in ("stock", "updated_at")]
    if fields:
        product.save(update_fields=[*fields, "updated_at"])

    if new_stock is not None:
        delta = int(new_stock) - int(locked.stock)
        if delta:
            adjust_stock(product_id=product.pk, quantity_delta=delta, note=note)

    product.refresh_from_db(fields=["stock", "updated_at"])
    return product
