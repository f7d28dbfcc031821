# products/services/exceptions.py

"""
STOCK SERVICE ERRORS

Centralized domain errors for stock operations. Sales and purchases
extend StockOperationError for their own state-machine errors.

Every business error carries a context() dict so the API layer can
return structured details without parsing messages.
"""


class StockOperationError(Exception):
    """Base exception for recoverable stock operation failures."""

    def context(self) -> dict:
        return {}


class StockValidationError(StockOperationError, ValueError):
    """Raised when service input is rejected before any write (maps to 400)."""


class InsufficientStockError(StockOperationError):
    """Raised when a deduction would take stock below zero."""

    def __init__(self, product_id, requested: int, available: int, message: str = None):
        self.product_id = product_id
        self.requested = int(requested)
        self.available = int(available)
        super().__init__(
            message
            or f"Insufficient stock for product ID {product_id}. "
            f"Requested: {self.requested}, Available: {self.available}"
        )

    def context(self) -> dict:
        return {
            "product_id": self.product_id,
            "requested": self.requested,
            "available": self.available,
        }


class ProductNotFoundError(StockOperationError):
    """Raised when a referenced product does not exist (or is inactive for sale)."""

    def __init__(self, product_id, message: str = None):
        self.product_id = product_id
        super().__init__(message or f"Product ID {product_id} not found.")

    def context(self) -> dict:
        return {"product_id": self.product_id}


class TransactionRequiredError(RuntimeError):
    """Raised when stock is touched without holding the row lock in an open transaction."""


class NegativeStockInvariantViolation(RuntimeError):
    """
    Stock would end up negative AFTER the insufficiency check passed.

    This is a logic defect, not a business rejection: it is never mapped
    to a client error and is logged at CRITICAL.
    """

    def __init__(self, product_id, current_qty: int, attempted_delta: int):
        self.product_id = product_id
        self.current_qty = int(current_qty)
        self.attempted_delta = int(attempted_delta)
        super().__init__(
            f"Stock operation would result in negative stock for product ID {product_id}. "
            f"Current: {self.current_qty}, Change: {self.attempted_delta}, "
            f"Resulting: {self.current_qty + self.attempted_delta}"
        )

    def context(self) -> dict:
        return {
            "product_id": self.product_id,
            "current_qty": self.current_qty,
            "attempted_delta": self.attempted_delta,
            "resulting_qty": self.current_qty + self.attempted_delta,
        }
