# products/services/stock_transaction.py

"""
STOCK TRANSACTION (explicit transaction + row-lock capability)

Every composite stock operation (sale, receipt, adjustment, cancellation)
runs inside ONE StockTransaction. The transaction is passed explicitly to
nested operations and to the stock mutator, instead of relying on an
ambient atomic block.

Rules:
- Product rows are locked with SELECT ... FOR UPDATE, by primary key
- Multi-product locks are ALWAYS acquired in ascending id order
  (no circular wait between two sales sharing products)
- The mutator refuses to touch a product this transaction has not locked
"""

from __future__ import annotations

from contextlib import contextmanager

from django.db import DEFAULT_DB_ALIAS, transaction

from products.models import Product
from products.services.exceptions import ProductNotFoundError, TransactionRequiredError


class StockTransaction:
    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using
        self._atomic = None
        self._locked = {}

    # --------------------------------------------------
    # scope
    # --------------------------------------------------
    def __enter__(self) -> "StockTransaction":
        if self._atomic is not None:
            raise TransactionRequiredError("StockTransaction is not re-entrant")

        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb):
        atomic, self._atomic = self._atomic, None
        self._locked = {}
        return atomic.__exit__(exc_type, exc, tb)

    @property
    def is_active(self) -> bool:
        return self._atomic is not None

    def require_active(self) -> None:
        if not self.is_active:
            raise TransactionRequiredError(
                "Stock operations must run inside an open StockTransaction"
            )

    # --------------------------------------------------
    # locks
    # --------------------------------------------------
    def lock_product(self, product_id) -> Product:
        """Lock a single product row (SELECT ... FOR UPDATE)."""
        self.require_active()

        pk = int(product_id)
        if pk in self._locked:
            return self._locked[pk]

        try:
            product = (
                Product.objects.using(self.using)
                .select_for_update()
                .get(pk=pk)
            )
        except Product.DoesNotExist as exc:
            raise ProductNotFoundError(pk) from exc

        self._locked[pk] = product
        return product

    def lock_products(self, product_ids) -> dict:
        """
        Lock every product in ascending id order.
        Returns {product_id: locked Product}.
        """
        ordered = sorted({int(pid) for pid in product_ids})
        return {pid: self.lock_product(pid) for pid in ordered}

    def holds_lock(self, product) -> bool:
        pk = getattr(product, "pk", product)
        return self.is_active and self._locked.get(pk) is product

    def locked_product_ids(self) -> list:
        return list(self._locked)


@contextmanager
def stock_transaction(txn: StockTransaction | None = None):
    """
    Use the caller's transaction when given, otherwise open a new one.
    Nested operations therefore share one transaction deliberately.
    """
    if txn is not None:
        txn.require_active()
        yield txn
        return

    with StockTransaction() as new_txn:
        yield new_txn
