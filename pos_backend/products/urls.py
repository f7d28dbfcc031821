# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register catalog + inventory routes under /api/products/
    /api/products/categories/
    /api/products/products/
    /api/products/products/<id>/reconcile/
    /api/products/products/alerts/low-stock/
    /api/products/movements/        (stock card, read-only)
    /api/products/adjustments/      (opname)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import (
    CategoryViewSet,
    ProductViewSet,
    StockAdjustmentViewSet,
    StockMovementViewSet,
)

router = DefaultRouter()

router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"products", ProductViewSet, basename="products")
router.register(r"movements", StockMovementViewSet, basename="stock-movements")
router.register(r"adjustments", StockAdjustmentViewSet, basename="stock-adjustments")

urlpatterns = [
    path("", include(router.urls)),
]
