from .exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    InventoryError,
    ProductNotFoundError,
)
from .stock import (
    adjust_stock,
    decrement_stock,
    reserve_stock,
    restore_stock,
    sale_reference,
    save_product_details,
    to_int_qty,
)

__all__ = [
    "InventoryError",
    "InvalidQuantityError",
    "ProductNotFoundError",
    "InsufficientStockError",
    "adjust_stock",
    "decrement_stock",
    "reserve_stock",
    "restore_stock",
    "sale_reference",
    "save_product_details",
    "to_int_qty",
]
