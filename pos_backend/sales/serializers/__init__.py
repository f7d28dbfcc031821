# sales/serializers/__init__.py

from .sale import SaleCreateSerializer, SaleLineInputSerializer, SaleSerializer
from .sale_item import SaleItemSerializer

__all__ = [
    "SaleCreateSerializer",
    "SaleItemSerializer",
    "SaleLineInputSerializer",
    "SaleSerializer",
]
