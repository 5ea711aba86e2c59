# sales/api/urls.py

"""
SALES API URLS

Provides:
- GET  /api/sales/              (history)
- POST /api/sales/              (POS checkout)
- GET  /api/sales/<uuid>/
- POST /api/sales/<uuid>/cancel/
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.viewsets.sale import SaleViewSet

router = SimpleRouter()
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("", include(router.urls)),
]
