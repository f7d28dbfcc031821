from .stock_adjustments import AdjustmentLine, create_stock_adjustment
from .stock_mutator import apply_stock_change
from .stock_transaction import StockTransaction, stock_transaction

__all__ = [
    "AdjustmentLine",
    "create_stock_adjustment",
    "apply_stock_change",
    "StockTransaction",
    "stock_transaction",
]
