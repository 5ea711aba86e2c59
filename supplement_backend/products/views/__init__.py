# products/views/__init__.py

"""
Products views package exports.

Purpose:
- Central export point for router imports.
"""

from .product import ProductViewSet

__all__ = [
    "ProductViewSet",
]
