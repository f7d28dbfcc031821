# products/api/errors.py

"""
DOMAIN ERROR -> HTTP RESPONSE

One mapping for every stock operation endpoint:
- insufficient stock            -> 409
- insufficient payment          -> 422
- missing sale / PO / product   -> 404
- lifecycle violations          -> 409
- rejected input               -> 400 (StockValidationError)

NegativeStockInvariantViolation, TransactionRequiredError and plain
ValueErrors are NOT business rejections. They are never mapped here and
surface as 500.
"""

from rest_framework import status
from rest_framework.response import Response

from products.services.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    StockOperationError,
)
from purchases.services.exceptions import (
    InvalidPurchaseOrderTransitionError,
    PurchaseOrderNotFoundError,
    SupplierNotFoundError,
)
from sales.services.exceptions import (
    InsufficientPaymentError,
    InvalidSaleTransitionError,
    SaleNotFoundError,
)

DOMAIN_ERRORS = (StockOperationError,)

_STATUS_BY_ERROR = (
    (InsufficientStockError, status.HTTP_409_CONFLICT),
    (InsufficientPaymentError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (
        (
            ProductNotFoundError,
            SaleNotFoundError,
            PurchaseOrderNotFoundError,
            SupplierNotFoundError,
        ),
        status.HTTP_404_NOT_FOUND,
    ),
    (
        (InvalidSaleTransitionError, InvalidPurchaseOrderTransitionError),
        status.HTTP_409_CONFLICT,
    ),
)


def status_for(exc: Exception) -> int:
    for error_types, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_types):
            return code
    return status.HTTP_400_BAD_REQUEST


def domain_error_response(exc: Exception) -> Response:
    """
    Usage:
        try:
            ...
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
    """
    payload = {"detail": str(exc), "error": type(exc).__name__}

    if isinstance(exc, StockOperationError):
        payload.update(exc.context())

    return Response(payload, status=status_for(exc))
