from .ledger_entries import LedgerEntryViewSet

__all__ = ["LedgerEntryViewSet"]
