# purchases/services/receiving_service.py

"""
PURCHASE RECEIVING SERVICE

Receive a PurchaseOrder atomically:

1) Lock the purchase order row
2) Validate status + items
3) Mark received (received_at / received_by)
4) Lock every item product (ascending id order)
5) Per item, in item order:
   - cost_price = unit_cost (last-cost valuation)
   - stock mutator: +quantity, PURCHASE movement referencing the PO

Any failure rolls back the status change, every cost update and every
stock change.
"""

from __future__ import annotations

import logging

from django.utils import timezone

from products.models import StockMovement
from products.services.stock_mutator import apply_stock_change
from products.services.stock_transaction import StockTransaction, stock_transaction
from purchases.models import PurchaseOrder
from purchases.services.exceptions import (
    EmptyPurchaseOrderError,
    PurchaseOrderNotFoundError,
)
from purchases.services.purchase_lifecycle import validate_transition

logger = logging.getLogger("purchases")


def receive_purchase_order(
    *,
    purchase_order_id,
    actor_id: int,
    txn: StockTransaction | None = None,
) -> PurchaseOrder:
    with stock_transaction(txn) as txn:
        try:
            po = (
                PurchaseOrder.objects.using(txn.using)
                .select_for_update()
                .get(pk=purchase_order_id)
            )
        except PurchaseOrder.DoesNotExist as exc:
            raise PurchaseOrderNotFoundError(purchase_order_id) from exc

        validate_transition(
            purchase_order=po, target_status=PurchaseOrder.STATUS_RECEIVED
        )

        items = list(po.items.using(txn.using).order_by("id"))
        if not items:
            raise EmptyPurchaseOrderError(
                f"Purchase order {po.purchase_number} has no items to receive."
            )

        po.status = PurchaseOrder.STATUS_RECEIVED
        po.received_at = timezone.now()
        po.received_by_id = actor_id
        po.save(
            using=txn.using,
            update_fields=["status", "received_at", "received_by", "updated_at"],
        )

        locked = txn.lock_products(item.product_id for item in items)

        for item in items:
            product = locked[item.product_id]
            product.cost_price = item.unit_cost

            apply_stock_change(
                txn=txn,
                product=product,
                quantity_delta=int(item.quantity),
                movement_type=StockMovement.MovementType.PURCHASE,
                reference=po,
                actor_id=actor_id,
            )

    logger.info(
        "Purchase order received",
        extra={
            "purchase_order_id": po.pk,
            "purchase_number": po.purchase_number,
            "items": len(items),
            "actor_id": actor_id,
        },
    )
    return po
