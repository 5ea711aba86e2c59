# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from accounting.api.views import LedgerEntryViewSet

router = SimpleRouter()
router.register("entries", LedgerEntryViewSet, basename="ledger-entry")

urlpatterns = [
    path("", include(router.urls)),
]
