# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register product domain routes under /api/products/
- Includes viewset actions like:
    /api/products/low-stock/
    /api/products/<uuid>/adjust-stock/
    /api/products/<uuid>/movements/
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from products.views import ProductViewSet

router = SimpleRouter()

router.register(r"", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
]
