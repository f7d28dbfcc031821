# sales/services/sale_service.py

"""
SALE SERVICE (CHECKOUT -> COMPLETED SALE)

Two phases, ONE StockTransaction:

1. Lock & validate
   - duplicate product lines are merged
   - products are locked in ascending id order
   - every product must exist, be active, and have enough stock
   - price / cost_price / name / sku are snapshotted from the locked row

2. Commit
   - subtotal = sum(price x qty); total = subtotal + tax - discount
   - cash with cash_given: must cover total (change_return computed), paid
   - cash without cash_given: unpaid
   - qris / debit / credit: paid (no gateway confirmation)
   - sale number TRX-YYYYMMDD-NNNN from the per-day counter
   - header, then per line: stock mutator (-qty) + SaleItem snapshot

Any error rolls back the header, every item and every stock change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from products.models import StockMovement
from products.services.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    StockValidationError,
)
from products.services.stock_mutator import apply_stock_change
from products.services.stock_transaction import StockTransaction, stock_transaction
from sales.models import Sale, SaleItem
from sales.services.exceptions import EmptySaleError, InsufficientPaymentError
from sequences.services import next_document_number

logger = logging.getLogger("sales")

SALE_NUMBER_PREFIX = "TRX"

TWOPLACES = Decimal("0.01")


@dataclass(frozen=True)
class SaleLine:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class PaymentInfo:
    method: str
    cash_given: Decimal | None = None
    discount_amount: Decimal = field(default=Decimal("0.00"))
    tax_amount: Decimal = field(default=Decimal("0.00"))
    notes: str = ""


# ============================================================
# INPUT NORMALIZATION
# ============================================================


def _to_money(value, name: str) -> Decimal:
    try:
        amount = Decimal(str(value)).quantize(TWOPLACES)
    except (InvalidOperation, TypeError, ValueError):
        raise StockValidationError(f"{name} must be a valid amount")

    if amount < Decimal("0.00"):
        raise StockValidationError(f"{name} cannot be negative")

    return amount


def _to_quantity(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise StockValidationError("quantity must be a whole number")

    if value < 1:
        raise StockValidationError("quantity must be at least 1")

    return value


def _merge_lines(items) -> dict:
    """
    {product_id: total quantity}, in first-seen order.
    """
    merged = {}
    for item in items or []:
        if isinstance(item, SaleLine):
            product_id, quantity = item.product_id, item.quantity
        elif isinstance(item, dict):
            product_id, quantity = item.get("product_id"), item.get("quantity")
        else:
            raise StockValidationError("Sale items must be SaleLine or dict")

        if product_id in (None, ""):
            raise StockValidationError("product_id is required")

        try:
            pid = int(product_id)
        except (TypeError, ValueError):
            raise StockValidationError("product_id must be an integer")

        merged[pid] = merged.get(pid, 0) + _to_quantity(quantity)

    if not merged:
        raise EmptySaleError()

    return merged


def _normalize_payment(payment: PaymentInfo) -> PaymentInfo:
    method = (payment.method or "").strip().lower()
    allowed = [choice for choice, _ in Sale.PAYMENT_METHOD_CHOICES]
    if method not in allowed:
        raise StockValidationError(f"payment method must be one of: {', '.join(allowed)}")

    cash_given = None
    if payment.cash_given is not None:
        cash_given = _to_money(payment.cash_given, "cash_given")

    return PaymentInfo(
        method=method,
        cash_given=cash_given,
        discount_amount=_to_money(payment.discount_amount or 0, "discount_amount"),
        tax_amount=_to_money(payment.tax_amount or 0, "tax_amount"),
        notes=(payment.notes or "").strip(),
    )


def _settle_payment(payment: PaymentInfo, total: Decimal):
    """
    Returns (payment_status, change_return).
    """
    if payment.method != Sale.METHOD_CASH:
        return Sale.PAYMENT_PAID, Decimal("0.00")

    if payment.cash_given is None:
        return Sale.PAYMENT_UNPAID, Decimal("0.00")

    if payment.cash_given < total:
        raise InsufficientPaymentError(payment.cash_given, total)

    return Sale.PAYMENT_PAID, payment.cash_given - total


# ============================================================
# PUBLIC API
# ============================================================


def create_sale(
    *,
    items,
    payment: PaymentInfo,
    actor_id: int,
    txn: StockTransaction | None = None,
) -> Sale:
    """
    Record a completed sale and deduct stock for every line.

    items:
      [SaleLine(product_id, quantity), ...] or
      [{"product_id": 1, "quantity": 2}, ...]
    """
    quantities = _merge_lines(items)
    payment = _normalize_payment(payment)

    with stock_transaction(txn) as txn:
        # -------------------------------
        # PHASE 1: lock + validate
        # -------------------------------
        locked = txn.lock_products(quantities)

        for product_id, product in locked.items():
            requested = quantities[product_id]

            if not product.is_active:
                raise ProductNotFoundError(
                    product_id,
                    message=f"Product ID {product_id} is not available for sale.",
                )

            if int(product.stock_qty) < requested:
                raise InsufficientStockError(
                    product_id,
                    requested=requested,
                    available=product.stock_qty,
                    message=(
                        f"Insufficient stock for product '{product.name}'. "
                        f"Available: {product.stock_qty}, Requested: {requested}"
                    ),
                )

        # -------------------------------
        # PHASE 2: totals + payment
        # -------------------------------
        subtotal = sum(
            (Decimal(locked[pid].price) * qty for pid, qty in quantities.items()),
            Decimal("0.00"),
        )
        total = subtotal + payment.tax_amount - payment.discount_amount
        if total < Decimal("0.00"):
            raise StockValidationError("discount cannot exceed subtotal + tax")

        payment_status, change_return = _settle_payment(payment, total)

        sale = Sale.objects.using(txn.using).create(
            sale_number=next_document_number(SALE_NUMBER_PREFIX, using=txn.using),
            status=Sale.STATUS_COMPLETED,
            payment_status=payment_status,
            payment_method=payment.method,
            subtotal=subtotal,
            tax_amount=payment.tax_amount,
            discount_amount=payment.discount_amount,
            total_amount=total,
            cash_given=payment.cash_given,
            change_return=change_return,
            notes=payment.notes,
            created_by_id=actor_id,
        )

        # -------------------------------
        # PHASE 2: stock + snapshots
        # -------------------------------
        for product_id, quantity in quantities.items():
            product = locked[product_id]

            apply_stock_change(
                txn=txn,
                product=product,
                quantity_delta=-quantity,
                movement_type=StockMovement.MovementType.SALE,
                reference=sale,
                actor_id=actor_id,
            )

            SaleItem.objects.using(txn.using).create(
                sale=sale,
                product=product,
                product_name=product.name,
                product_sku=product.sku,
                quantity=quantity,
                price=product.price,
                cost_price=product.cost_price,
                subtotal=Decimal(product.price) * quantity,
            )

    logger.info(
        "Sale completed",
        extra={
            "sale_id": sale.pk,
            "sale_number": sale.sale_number,
            "total_amount": str(sale.total_amount),
            "items": len(quantities),
            "actor_id": actor_id,
        },
    )
    return sale
