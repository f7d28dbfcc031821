# sales/services/exceptions.py

"""
SALES SERVICE ERRORS

All extend products.services.exceptions.StockOperationError so the API
layer can map every business rejection in one place.
"""

from decimal import Decimal

from products.services.exceptions import StockOperationError, StockValidationError


class EmptySaleError(StockValidationError):
    """Raised when a sale is submitted without line items."""

    def __init__(self, message: str = "Sale must have at least one item"):
        super().__init__(message)


class InsufficientPaymentError(StockOperationError):
    """Cash tendered is lower than the sale total."""

    def __init__(self, cash_given, total):
        self.cash_given = Decimal(cash_given)
        self.total = Decimal(total)
        super().__init__(
            f"Insufficient payment. Total: {self.total}, Cash given: {self.cash_given}"
        )

    def context(self) -> dict:
        return {
            "cash_given": str(self.cash_given),
            "total": str(self.total),
            "shortfall": str(self.total - self.cash_given),
        }


class SaleNotFoundError(StockOperationError):
    def __init__(self, sale_id):
        self.sale_id = sale_id
        super().__init__(f"Sale ID {sale_id} not found.")

    def context(self) -> dict:
        return {"sale_id": self.sale_id}


class InvalidSaleTransitionError(StockOperationError):
    """Raised when a sale status change violates the lifecycle."""

    def __init__(self, sale_id, current_status, target_status, message: str = None):
        self.sale_id = sale_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            message
            or f"Invalid sale transition: {current_status} -> {target_status}"
        )

    def context(self) -> dict:
        return {
            "sale_id": self.sale_id,
            "current_status": self.current_status,
            "target_status": self.target_status,
        }


class AlreadyCancelledError(InvalidSaleTransitionError):
    def __init__(self, sale_id, sale_number: str = ""):
        self.sale_number = sale_number
        super().__init__(
            sale_id,
            "cancelled",
            "cancelled",
            message=f"Sale {sale_number or sale_id} is already cancelled.",
        )
