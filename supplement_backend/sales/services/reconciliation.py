# sales/services/reconciliation.py

"""
SALES <-> LEDGER RECONCILIATION

Every committed sale must have exactly one paid income entry whose amount
equals the sale total. The checkout transaction guarantees this for sales
created here; this module finds (and optionally repairs) rows that violate
it, e.g. data imported from an older, non-transactional store.

Repair only posts MISSING entries. Amount mismatches are reported, never
rewritten: the operator decides which side is wrong.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.db import transaction
from django.db.models import Count

from accounting.models import LedgerEntry
from accounting.services.exceptions import AccountingServiceError
from accounting.services.posting import post_sale_income
from sales.models import Sale

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    checked: int = 0
    missing_entries: list = field(default_factory=list)
    duplicate_entries: list = field(default_factory=list)
    amount_mismatches: list = field(default_factory=list)
    repaired: list = field(default_factory=list)

    @property
    def problems(self) -> int:
        return (
            len(self.missing_entries) - len(self.repaired)
            + len(self.duplicate_entries)
            + len(self.amount_mismatches)
        )


def reconcile_sales(*, repair: bool = False) -> ReconciliationReport:
    report = ReconciliationReport()

    sales = (
        Sale.objects.filter(status=Sale.STATUS_COMPLETED)
        .annotate(entry_count=Count("ledger_entries"))
        .order_by("created_at")
    )

    for sale in sales:
        report.checked += 1

        if sale.entry_count == 0:
            report.missing_entries.append(str(sale.id))
            continue

        if sale.entry_count > 1:
            report.duplicate_entries.append((str(sale.id), sale.entry_count))
            continue

        entry = LedgerEntry.objects.get(related_sale=sale)
        if entry.amount != sale.total:
            report.amount_mismatches.append((str(sale.id), sale.total, entry.amount))

    if repair:
        for sale_id in report.missing_entries:
            try:
                with transaction.atomic():
                    sale = Sale.objects.select_for_update().get(pk=sale_id)
                    post_sale_income(sale=sale)
            except AccountingServiceError as exc:
                logger.warning("Could not repair sale %s: %s", sale_id, exc.message)
                continue
            report.repaired.append(sale_id)
            logger.warning("Reconciliation posted missing income entry for sale %s", sale_id)

    return report
