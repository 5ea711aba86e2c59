from .ledger_entries import (
    LedgerEntryCreateSerializer,
    LedgerEntrySerializer,
    MarkPaidSerializer,
)

__all__ = [
    "LedgerEntrySerializer",
    "LedgerEntryCreateSerializer",
    "MarkPaidSerializer",
]
