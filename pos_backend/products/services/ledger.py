# products/services/ledger.py

"""
STOCK LEDGER QUERIES + RECONCILIATION

Read side of the StockMovement log:
- movement history (stock card) with filters
- movements attached to a document reference
- reconciliation: replaying a product's movements in creation order must
  reproduce every stock_before / stock_after pair and the current stock_qty
"""

from __future__ import annotations

from dataclasses import dataclass, field

from products.models import Product, StockMovement


def movement_history(
    *,
    product_id=None,
    movement_type: str | None = None,
    date_from=None,
    date_to=None,
):
    """Stock card: newest first."""
    qs = StockMovement.objects.select_related("product", "performed_by")

    if product_id:
        qs = qs.filter(product_id=product_id)

    if movement_type:
        qs = qs.filter(movement_type=movement_type)

    if date_from:
        qs = qs.filter(created_at__date__gte=date_from)

    if date_to:
        qs = qs.filter(created_at__date__lte=date_to)

    return qs.order_by("-created_at", "-id")


def movements_for_reference(ref):
    return StockMovement.objects.for_reference(ref).order_by("created_at", "id")


@dataclass
class ReconciliationResult:
    product_id: int
    expected_qty: int | None
    actual_qty: int
    movement_count: int
    problems: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


def reconcile_product(product: Product) -> ReconciliationResult:
    """
    Replay the product's ledger from its first recorded stock_before.
    stock_qty is read from the database, never from the passed instance.

    A product with no movements is consistent by definition (its stock
    came from catalog creation and was never changed).
    """
    movements = list(
        StockMovement.objects.filter(product_id=product.pk)
        .order_by("created_at", "id")
        .values_list("id", "quantity", "stock_before", "stock_after")
    )

    actual = int(
        Product.objects.filter(pk=product.pk).values_list("stock_qty", flat=True).get()
    )
    result = ReconciliationResult(
        product_id=product.pk,
        expected_qty=None,
        actual_qty=actual,
        movement_count=len(movements),
    )

    if not movements:
        return result

    running = movements[0][2]
    for movement_id, quantity, before, after in movements:
        if before != running:
            result.problems.append(
                f"movement {movement_id}: stock_before={before}, expected {running}"
            )

        if after != before + quantity:
            result.problems.append(
                f"movement {movement_id}: stock_after={after} != {before} + {quantity}"
            )

        if after < 0:
            result.problems.append(f"movement {movement_id}: negative stock_after={after}")

        running = before + quantity

    result.expected_qty = running

    if running != actual:
        result.problems.append(
            f"replayed stock {running} != product stock_qty {actual}"
        )

    return result


def reconcile_all(*, product_ids=None) -> list:
    qs = Product.objects.all().order_by("id")
    if product_ids:
        qs = qs.filter(id__in=product_ids)
    return [reconcile_product(p) for p in qs.iterator()]
