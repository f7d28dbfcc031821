# sales/services/sale_cancellation.py

"""
SALE CANCELLATION (STOCK RESTORATION)

GUARANTEES:
- Cancellable exactly once: a second call raises AlreadyCancelledError
- Every restored line goes through the stock mutator and leaves a
  SALE_CANCEL ledger row referencing the sale (reconciliation holds)
- Lock order: sale row first, then products in ascending id order
- Lines whose product no longer exists are skipped (logged)
- All-or-nothing
"""

from __future__ import annotations

import logging

from django.utils import timezone

from products.models import StockMovement
from products.services.stock_mutator import apply_stock_change
from products.services.stock_transaction import StockTransaction, stock_transaction
from sales.models import Sale
from sales.services.exceptions import SaleNotFoundError
from sales.services.sale_lifecycle import validate_transition

logger = logging.getLogger("sales")


def cancel_sale(
    *,
    sale_id,
    actor_id: int,
    txn: StockTransaction | None = None,
) -> Sale:
    with stock_transaction(txn) as txn:
        try:
            sale = Sale.objects.using(txn.using).select_for_update().get(pk=sale_id)
        except Sale.DoesNotExist as exc:
            raise SaleNotFoundError(sale_id) from exc

        validate_transition(sale=sale, target_status=Sale.STATUS_CANCELLED)

        items = list(sale.items.using(txn.using).order_by("id"))

        restorable = []
        for item in items:
            if item.product_id is None:
                logger.warning(
                    "Sale item product missing, stock not restored",
                    extra={
                        "sale_id": sale.pk,
                        "sale_item_id": item.pk,
                        "product_sku": item.product_sku,
                        "quantity": item.quantity,
                    },
                )
                continue
            restorable.append(item)

        locked = txn.lock_products(item.product_id for item in restorable)

        for item in restorable:
            apply_stock_change(
                txn=txn,
                product=locked[item.product_id],
                quantity_delta=int(item.quantity),
                movement_type=StockMovement.MovementType.SALE_CANCEL,
                reference=sale,
                actor_id=actor_id,
            )

        now = timezone.now()
        annotation = f"[Cancelled by user {actor_id} at {now.isoformat()}]"

        sale.status = Sale.STATUS_CANCELLED
        sale.cancelled_at = now
        sale.cancelled_by_id = actor_id
        sale.notes = f"{sale.notes}\n{annotation}" if sale.notes else annotation
        sale.save(
            using=txn.using,
            update_fields=["status", "cancelled_at", "cancelled_by", "notes", "updated_at"],
        )

    logger.info(
        "Sale cancelled",
        extra={
            "sale_id": sale.pk,
            "sale_number": sale.sale_number,
            "restored_items": len(restorable),
            "actor_id": actor_id,
        },
    )
    return sale
