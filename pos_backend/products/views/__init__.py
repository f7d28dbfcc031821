# products/views/__init__.py

"""
Products views package exports.

Purpose:
- Central export point for router imports.
"""

from .category import CategoryViewSet
from .product import ProductViewSet
from .stock_adjustment import StockAdjustmentViewSet
from .stock_movement import StockMovementViewSet

__all__ = [
    "CategoryViewSet",
    "ProductViewSet",
    "StockAdjustmentViewSet",
    "StockMovementViewSet",
]
