# purchases/services/exceptions.py

"""
PURCHASING SERVICE ERRORS
"""

from products.services.exceptions import StockOperationError, StockValidationError


class SupplierNotFoundError(StockOperationError):
    def __init__(self, supplier_id):
        self.supplier_id = supplier_id
        super().__init__(f"Supplier ID {supplier_id} not found.")

    def context(self) -> dict:
        return {"supplier_id": self.supplier_id}


class PurchaseOrderNotFoundError(StockOperationError):
    def __init__(self, purchase_order_id):
        self.purchase_order_id = purchase_order_id
        super().__init__(f"Purchase order ID {purchase_order_id} not found.")

    def context(self) -> dict:
        return {"purchase_order_id": self.purchase_order_id}


class EmptyPurchaseOrderError(StockValidationError):
    def __init__(self, message: str = "Purchase order must have at least one item"):
        super().__init__(message)


class InvalidPurchaseOrderTransitionError(StockOperationError):
    """Raised when a purchase order status change violates the lifecycle."""

    def __init__(self, purchase_order_id, current_status, target_status, message: str = None):
        self.purchase_order_id = purchase_order_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            message
            or f"Invalid purchase order transition: {current_status} -> {target_status}"
        )

    def context(self) -> dict:
        return {
            "purchase_order_id": self.purchase_order_id,
            "current_status": self.current_status,
            "target_status": self.target_status,
        }


class AlreadyReceivedError(InvalidPurchaseOrderTransitionError):
    def __init__(self, purchase_order_id, purchase_number: str = ""):
        super().__init__(
            purchase_order_id,
            "received",
            "received",
            message=f"Purchase order {purchase_number or purchase_order_id} has already been received.",
        )


class CannotReceiveCancelledError(InvalidPurchaseOrderTransitionError):
    def __init__(self, purchase_order_id, purchase_number: str = ""):
        super().__init__(
            purchase_order_id,
            "cancelled",
            "received",
            message=f"Cannot receive cancelled purchase order {purchase_number or purchase_order_id}.",
        )
