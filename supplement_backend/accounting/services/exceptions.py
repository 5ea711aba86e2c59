# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services.
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""

    code = "ACCOUNTING_ERROR"
    default_message = "Accounting operation failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidLedgerEntryError(AccountingServiceError):
    """Raised when a ledger entry payload is invalid (amount, type, category)."""

    code = "INVALID_LEDGER_ENTRY"
    default_message = "Invalid ledger entry."


class LedgerEntryNotFoundError(AccountingServiceError):
    code = "LEDGER_ENTRY_NOT_FOUND"
    default_message = "Ledger entry not found."


class LedgerEntryLinkedToSaleError(AccountingServiceError):
    """Raised when a sale-derived entry is deleted outside sale cancellation."""

    code = "LEDGER_ENTRY_LINKED_TO_SALE"
    default_message = "Ledger entry is linked to a sale and cannot be deleted. Cancel the sale instead."


class DuplicatePostingError(AccountingServiceError):
    """Raised when a sale already has its income entry."""

    code = "DUPLICATE_POSTING"
    default_message = "Sale income has already been posted."
