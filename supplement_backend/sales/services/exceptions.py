# sales/services/exceptions.py

"""
SALE WORKFLOW ERRORS

Validation errors (EmptyCart, InvalidCart, InvalidPaymentMethod) are raised
before any database access. SaleNotFound is raised by cancellation.
StoreUnavailable wraps any database failure; the surrounding transaction has
already been rolled back when it reaches the caller.

Stock errors (ProductNotFoundError, InsufficientStockError) live in
products.services.exceptions and propagate unchanged.
"""


class SaleWorkflowError(Exception):
    """Base checkout / cancellation exception."""

    code = "SALE_ERROR"
    default_message = "Sale operation failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class EmptyCartError(SaleWorkflowError):
    code = "EMPTY_CART"
    default_message = "Cart is empty."


class InvalidCartError(SaleWorkflowError):
    code = "INVALID_CART"
    default_message = "Cart contains an invalid line."


class InvalidPaymentMethodError(InvalidCartError):
    default_message = "Payment method must be one of: cash, credit, debit, pix."


class SaleNotFoundError(SaleWorkflowError):
    code = "SALE_NOT_FOUND"
    default_message = "Sale not found."


class StoreUnavailableError(SaleWorkflowError):
    code = "STORE_UNAVAILABLE"
    default_message = "The store database is unavailable. No changes were saved."
