# sales/api/urls.py

"""
SALES API URLS

Provides:
    /api/sales/               list + checkout (POST)
    /api/sales/<id>/          retrieve
    /api/sales/<id>/cancel/   cancel (POST)
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.viewsets.sale import SaleViewSet

router = SimpleRouter()
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("", include(router.urls)),
]
