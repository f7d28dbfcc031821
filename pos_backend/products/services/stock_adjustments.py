# products/services/stock_adjustments.py

"""
STOCK ADJUSTMENTS SERVICE (OPNAME)

Purpose:
- Apply a batch of manual, signed stock corrections in one transaction.
- Enforce auditability via immutable StockMovement rows referencing
  the StockAdjustment header.

Rules:
- reason must be one of StockAdjustment.Reason
- every quantity_change must be a non-zero integer
- a missing product aborts the whole batch (no partial adjustment)
- each item independently obeys the non-negative stock rule
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from products.models import StockAdjustment, StockMovement
from products.services.exceptions import StockValidationError
from products.services.stock_mutator import apply_stock_change
from products.services.stock_transaction import StockTransaction, stock_transaction

logger = logging.getLogger("inventory")


@dataclass(frozen=True)
class AdjustmentLine:
    product_id: int
    quantity_change: int


def _to_int_delta(value) -> int:
    if value is None or value == "":
        raise StockValidationError("quantity_change is required")

    if isinstance(value, bool):
        # guardrail: bool is an int subclass in Python
        raise StockValidationError("quantity_change must be an integer")

    try:
        delta = int(value)
    except (TypeError, ValueError):
        raise StockValidationError("quantity_change must be an integer")

    if delta != value and not isinstance(value, str):
        raise StockValidationError("quantity_change must be an integer")

    if delta == 0:
        raise StockValidationError("quantity_change cannot be 0")

    return delta


def _normalize_lines(items) -> list:
    lines = []
    for item in items or []:
        if isinstance(item, AdjustmentLine):
            product_id, change = item.product_id, item.quantity_change
        elif isinstance(item, dict):
            product_id, change = item.get("product_id"), item.get("quantity_change")
        else:
            raise StockValidationError("Adjustment items must be AdjustmentLine or dict")

        if product_id in (None, ""):
            raise StockValidationError("product_id is required")

        try:
            product_id = int(product_id)
        except (TypeError, ValueError):
            raise StockValidationError("product_id must be an integer")

        lines.append(AdjustmentLine(product_id, _to_int_delta(change)))

    if not lines:
        raise StockValidationError("Adjustment must have at least one item")

    return lines


def create_stock_adjustment(
    *,
    reason: str,
    notes: str = "",
    items,
    actor_id: int,
    txn: StockTransaction | None = None,
) -> StockAdjustment:
    """
    Create a stock adjustment (opname) and apply every line atomically.

    items:
      [AdjustmentLine(product_id, quantity_change), ...] or
      [{"product_id": 1, "quantity_change": -2}, ...]
    """
    if reason not in StockAdjustment.Reason.values:
        raise StockValidationError(
            f"reason must be one of: {', '.join(StockAdjustment.Reason.values)}"
        )

    lines = _normalize_lines(items)

    with stock_transaction(txn) as txn:
        adjustment = StockAdjustment.objects.using(txn.using).create(
            reason=reason,
            notes=(notes or "").strip(),
            created_by_id=actor_id,
        )

        locked = txn.lock_products(line.product_id for line in lines)

        for line in lines:
            apply_stock_change(
                txn=txn,
                product=locked[line.product_id],
                quantity_delta=line.quantity_change,
                movement_type=StockMovement.MovementType.ADJUSTMENT,
                reference=adjustment,
                actor_id=actor_id,
            )

    logger.info(
        "Stock adjustment created",
        extra={
            "adjustment_id": adjustment.pk,
            "reason": reason,
            "items": len(lines),
            "actor_id": actor_id,
        },
    )
    return adjustment
