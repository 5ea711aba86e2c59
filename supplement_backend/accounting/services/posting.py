# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ADAPTER (SALES -> CASH LEDGER)

This module should remain a thin adapter:
- It DOES NOT do workflows (sales.services.sale_workflow does).
- It DOES map sale events -> ledger entries.

Rules:
- One income entry per sale (idempotent: a second post raises DuplicatePostingError).
- Sale income is always paid=True: the POS collects payment at checkout.
- Retraction is only called by the cancel workflow, inside its transaction.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from accounting.models import LedgerEntry
from accounting.services.exceptions import DuplicatePostingError, InvalidLedgerEntryError

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def sales_category() -> str:
    return getattr(settings, "SALES_LEDGER_CATEGORY", "Vendas") or "Vendas"


def sale_description(sale) -> str:
    return f"Venda #{str(sale.id)[:8]} - {str(sale.payment_method or '').upper()}"


def post_sale_income(*, sale) -> LedgerEntry:
    """
    Post the income entry for a committed sale.

    Must run inside the caller's transaction so the entry commits (or rolls
    back) together with the sale, its items and the stock decrements.
    """
    if LedgerEntry.objects.filter(related_sale=sale).exists():
        raise DuplicatePostingError(f"Sale {sale.id} already has an income entry.")

    amount = _money(sale.total)
    if amount <= Decimal("0.00"):
        raise InvalidLedgerEntryError(f"Sale {sale.id} has a non-positive total ({amount}).")

    entry = LedgerEntry.objects.create(
        entry_type=LedgerEntry.TYPE_INCOME,
        category=sales_category(),
        description=sale_description(sale),
        amount=amount,
        payment_method=sale.payment_method,
        related_sale=sale,
        paid=True,
    )

    logger.info("Posted sale income %s for sale %s (%s)", entry.id, sale.id, amount)
    return entry


def retract_sale_income(*, sale) -> int:
    """
    Remove the income entry of a sale being cancelled.

    Queryset delete bypasses LedgerEntry.delete() (which refuses sale-linked
    rows); this is the one sanctioned path. Returns the number of rows removed.
    """
    deleted, _ = LedgerEntry.objects.filter(related_sale=sale).delete()

    if deleted == 0:
        logger.warning("Sale %s had no income entry to retract", sale.id)
    else:
        logger.info("Retracted %s income entr(y/ies) for sale %s", deleted, sale.id)

    return deleted
