# products/services/exceptions.py

"""
INVENTORY SERVICE ERRORS

Every error carries a stable `code` (used by API error bodies) and a
human-readable message safe to show to the operator.
"""


class InventoryError(Exception):
    """Base exception for stock service failures."""

    code = "INVENTORY_ERROR"
    default_message = "Inventory operation failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidQuantityError(InventoryError, ValueError):
    code = "INVALID_QUANTITY"
    default_message = "Quantity must be a whole number of units."


class ProductNotFoundError(InventoryError):
    code = "PRODUCT_NOT_FOUND"
    default_message = "Product not found."

    def __init__(self, product_id=None):
        self.product_id = product_id
        message = self.default_message
        if product_id is not None:
            message = f"Product not found: {product_id}"
        super().__init__(message)


class InsufficientStockError(InventoryError):
    code = "INSUFFICIENT_STOCK"
    default_message = "Insufficient stock."

    def __init__(self, *, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = int(available)
        self.requested = int(requested)
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {self.available}, Requested: {self.requested}"
        )
