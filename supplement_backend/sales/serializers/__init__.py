from .sale import CartLineInputSerializer, CreateSaleInputSerializer, SaleSerializer
from .sale_item import SaleItemSerializer

__all__ = [
    "CartLineInputSerializer",
    "CreateSaleInputSerializer",
    "SaleSerializer",
    "SaleItemSerializer",
]
