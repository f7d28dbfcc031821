# products/services/stock_mutator.py

"""
STOCK MUTATOR (single stock choke point)

Purpose:
- The ONLY code path allowed to change Product.stock_qty
- The ONLY code path allowed to write a StockMovement

Contract:
- Caller holds the product's row lock inside an open StockTransaction
- Deductions that would go below zero raise InsufficientStockError
  and leave no trace
- Otherwise: exactly one product UPDATE + exactly one ledger INSERT
"""

from __future__ import annotations

import logging

from products.models import Product, StockMovement
from products.references import reference_for, to_columns
from products.services.exceptions import (
    InsufficientStockError,
    NegativeStockInvariantViolation,
    TransactionRequiredError,
)
from products.services.stock_transaction import StockTransaction

logger = logging.getLogger("inventory")


def _to_int_delta(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("quantity_delta must be a whole integer unit")

    if value == 0:
        raise ValueError("quantity_delta cannot be 0")

    return value


def apply_stock_change(
    *,
    txn: StockTransaction,
    product: Product,
    quantity_delta: int,
    movement_type: str,
    reference,
    actor_id: int,
) -> int:
    """
    Change stock by `quantity_delta` and append the matching ledger row.

    `reference` is a Sale / PurchaseOrder / StockAdjustment instance or a
    MovementReference. Pending cost_price changes on the locked product are
    persisted in the same UPDATE. Returns the new stock_qty.
    """
    if not txn.holds_lock(product):
        raise TransactionRequiredError(
            f"Product ID {getattr(product, 'pk', product)} must be locked by the "
            "enclosing StockTransaction before its stock can change"
        )

    delta = _to_int_delta(quantity_delta)
    current = int(product.stock_qty)

    if delta < 0 and current + delta < 0:
        raise InsufficientStockError(
            product.pk,
            requested=abs(delta),
            available=current,
            message=(
                f"Insufficient stock for product '{product.name}'. "
                f"Available: {current}, Deducting: {abs(delta)}"
            ),
        )

    stock_before = current
    stock_after = current + delta

    if stock_after < 0:
        logger.critical(
            "Negative stock invariant violated",
            extra={
                "product_id": product.pk,
                "current_qty": current,
                "attempted_delta": delta,
            },
        )
        raise NegativeStockInvariantViolation(product.pk, current, delta)

    product.stock_qty = stock_after
    product.save(using=txn.using, update_fields=["stock_qty", "cost_price", "updated_at"])

    reference_type, reference_id = to_columns(reference_for(reference))

    StockMovement.objects.using(txn.using).create(
        product=product,
        movement_type=movement_type,
        reference_type=reference_type,
        reference_id=reference_id,
        quantity=delta,
        stock_before=stock_before,
        stock_after=stock_after,
        performed_by_id=actor_id,
    )

    logger.debug(
        "Stock changed",
        extra={
            "product_id": product.pk,
            "movement_type": movement_type,
            "quantity": delta,
            "stock_before": stock_before,
            "stock_after": stock_after,
        },
    )

    return stock_after
