# PATH: accounting/services/ledger_service.py

"""
LEDGER ENTRY SERVICE (USER-FACING)

Responsibilities:
- Record manual income/expense entries (expenses screen)
- Toggle paid status (bills with due dates)
- Guarded deletion: entries linked to a sale are rejected; they disappear only
  when the sale itself is cancelled

Rules:
- amount must be > 0
- income entries are recorded as paid; expenses start unpaid
- manual entries never carry a related_sale (only posting.py links sales)
"""

from __future__ import annotations

import logging
from datetime import date as date_type
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction

from accounting.models import LedgerEntry
from accounting.services.exceptions import (
    InvalidLedgerEntryError,
    LedgerEntryLinkedToSaleError,
    LedgerEntryNotFoundError,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
DEFAULT_DESCRIPTION = "Sem descrição"


def _money(v) -> Decimal:
    try:
        return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidLedgerEntryError("amount must be a valid decimal") from exc


def _get_entry(entry_id, *, for_update: bool = False) -> LedgerEntry:
    qs = LedgerEntry.objects.all()
    if for_update:
        qs = qs.select_for_update()

    entry = qs.filter(pk=entry_id).first()
    if entry is None:
        raise LedgerEntryNotFoundError()
    return entry


@transaction.atomic
def record_entry(
    *,
    entry_type: str,
    category: str,
    amount,
    description: str = "",
    payment_method: str = "",
    due_date: date_type | None = None,
) -> LedgerEntry:
    entry_type = (entry_type or "").strip().lower()
    if entry_type not in (LedgerEntry.TYPE_INCOME, LedgerEntry.TYPE_EXPENSE):
        raise InvalidLedgerEntryError("entry_type must be 'income' or 'expense'")

    category = (category or "").strip()
    if not category:
        raise InvalidLedgerEntryError("category is required")

    amt = _money(amount)
    if amt <= Decimal("0.00"):
        raise InvalidLedgerEntryError("amount must be greater than zero")

    if due_date is not None and not isinstance(due_date, date_type):
        raise InvalidLedgerEntryError("due_date must be a date")

    entry = LedgerEntry.objects.create(
        entry_type=entry_type,
        category=category,
        amount=amt,
        description=(description or "").strip() or DEFAULT_DESCRIPTION,
        payment_method=(payment_method or "").strip().lower(),
        paid=entry_type == LedgerEntry.TYPE_INCOME,
        due_date=due_date,
    )

    logger.info("Recorded %s entry %s: %s (%s)", entry_type, entry.id, amt, category)
    return entry


@transaction.atomic
def set_paid_status(*, entry_id, paid: bool) -> LedgerEntry:
    entry = _get_entry(entry_id, for_update=True)

    if entry.is_sale_linked and not paid:
        raise InvalidLedgerEntryError("Sale income is always paid.")

    if entry.paid != bool(paid):
        entry.paid = bool(paid)
        entry.save(update_fields=["paid"])

    return entry


@transaction.atomic
def delete_entry(*, entry_id) -> None:
    entry = _get_entry(entry_id, for_update=True)

    if entry.is_sale_linked:
        logger.warning(
            "Refused to delete ledger entry %s: linked to sale %s",
            entry.id,
            entry.related_sale_id,
        )
        raise LedgerEntryLinkedToSaleError()

    entry.delete()
    logger.info("Deleted ledger entry %s", entry_id)
