# products/serializers/__init__.py

from .category import CategorySerializer
from .product import ProductSerializer
from .stock_adjustment import (
    AdjustmentItemInputSerializer,
    StockAdjustmentCreateSerializer,
    StockAdjustmentSerializer,
)
from .stock_movement import StockMovementSerializer

__all__ = [
    "AdjustmentItemInputSerializer",
    "CategorySerializer",
    "ProductSerializer",
    "StockAdjustmentCreateSerializer",
    "StockAdjustmentSerializer",
    "StockMovementSerializer",
]
