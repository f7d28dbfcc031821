# purchases/services/purchase_order_service.py

"""
PURCHASE ORDER SERVICE

- create_purchase_order:        new PO (pending) + items, PO-YYYYMMDD-NNNN
- mark_purchase_order_ordered:  pending -> ordered (stamps ordered_at)
- cancel_purchase_order:        pending -> cancelled

Stock is NOT touched here. Only receiving changes stock
(see purchases.services.receiving_service).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from products.models import Product
from products.services.exceptions import ProductNotFoundError, StockValidationError
from purchases.models import PurchaseOrder, PurchaseOrderItem, Supplier
from purchases.services.exceptions import (
    EmptyPurchaseOrderError,
    PurchaseOrderNotFoundError,
    SupplierNotFoundError,
)
from purchases.services.purchase_lifecycle import validate_transition
from sequences.services import next_document_number

logger = logging.getLogger("purchases")

PURCHASE_NUMBER_PREFIX = "PO"

TWOPLACES = Decimal("0.01")


@dataclass(frozen=True)
class PurchaseLine:
    product_id: int
    quantity: int
    unit_cost: Decimal


def _to_unit_cost(value) -> Decimal:
    try:
        cost = Decimal(str(value)).quantize(TWOPLACES)
    except (InvalidOperation, TypeError, ValueError):
        raise StockValidationError("unit_cost must be a valid amount")

    if cost < Decimal("0.00"):
        raise StockValidationError("unit_cost cannot be negative")

    return cost


def _to_quantity(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise StockValidationError("quantity must be a whole number")

    if value < 1:
        raise StockValidationError("quantity must be at least 1")

    return value


def _normalize_lines(items) -> list:
    lines = []
    for item in items or []:
        if isinstance(item, PurchaseLine):
            product_id, quantity, unit_cost = item.product_id, item.quantity, item.unit_cost
        elif isinstance(item, dict):
            product_id = item.get("product_id")
            quantity = item.get("quantity")
            unit_cost = item.get("unit_cost")
        else:
            raise StockValidationError("Purchase order items must be PurchaseLine or dict")

        if product_id in (None, ""):
            raise StockValidationError("product_id is required")

        try:
            product_id = int(product_id)
        except (TypeError, ValueError):
            raise StockValidationError("product_id must be an integer")

        lines.append(
            PurchaseLine(product_id, _to_quantity(quantity), _to_unit_cost(unit_cost))
        )

    if not lines:
        raise EmptyPurchaseOrderError()

    return lines


def _lock_purchase_order(purchase_order_id) -> PurchaseOrder:
    try:
        return PurchaseOrder.objects.select_for_update().get(pk=purchase_order_id)
    except PurchaseOrder.DoesNotExist as exc:
        raise PurchaseOrderNotFoundError(purchase_order_id) from exc


@transaction.atomic
def create_purchase_order(
    *,
    supplier_id,
    items,
    actor_id: int,
    expected_delivery_date=None,
    notes: str = "",
) -> PurchaseOrder:
    """
    items:
      [PurchaseLine(product_id, quantity, unit_cost), ...] or
      [{"product_id": 1, "quantity": 20, "unit_cost": "60.00"}, ...]
    """
    lines = _normalize_lines(items)

    try:
        supplier = Supplier.objects.get(pk=supplier_id, is_active=True)
    except Supplier.DoesNotExist as exc:
        raise SupplierNotFoundError(supplier_id) from exc

    product_ids = {line.product_id for line in lines}
    products = Product.objects.in_bulk(product_ids)
    for product_id in sorted(product_ids):
        if product_id not in products:
            raise ProductNotFoundError(product_id)

    po = PurchaseOrder.objects.create(
        supplier=supplier,
        purchase_number=next_document_number(PURCHASE_NUMBER_PREFIX),
        status=PurchaseOrder.STATUS_PENDING,
        expected_delivery_date=expected_delivery_date,
        notes=(notes or "").strip(),
        created_by_id=actor_id,
    )

    for line in lines:
        PurchaseOrderItem.objects.create(
            purchase_order=po,
            product=products[line.product_id],
            quantity=line.quantity,
            unit_cost=line.unit_cost,
        )

    logger.info(
        "Purchase order created",
        extra={
            "purchase_order_id": po.pk,
            "purchase_number": po.purchase_number,
            "supplier_id": supplier.pk,
            "items": len(lines),
            "actor_id": actor_id,
        },
    )
    return po


@transaction.atomic
def mark_purchase_order_ordered(*, purchase_order_id) -> PurchaseOrder:
    po = _lock_purchase_order(purchase_order_id)
    validate_transition(purchase_order=po, target_status=PurchaseOrder.STATUS_ORDERED)

    po.status = PurchaseOrder.STATUS_ORDERED
    po.ordered_at = timezone.localdate()
    po.save(update_fields=["status", "ordered_at", "updated_at"])

    logger.info(
        "Purchase order marked as ordered",
        extra={"purchase_order_id": po.pk, "purchase_number": po.purchase_number},
    )
    return po


@transaction.atomic
def cancel_purchase_order(*, purchase_order_id) -> PurchaseOrder:
    po = _lock_purchase_order(purchase_order_id)
    validate_transition(purchase_order=po, target_status=PurchaseOrder.STATUS_CANCELLED)

    po.status = PurchaseOrder.STATUS_CANCELLED
    po.save(update_fields=["status", "updated_at"])

    logger.info(
        "Purchase order cancelled",
        extra={"purchase_order_id": po.pk, "purchase_number": po.purchase_number},
    )
    return po
