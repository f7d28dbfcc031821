# sales/tests/test_concurrency.py

import threading
import unittest
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import connection
from django.test import TransactionTestCase

from products.models import Product, StockMovement
from products.services.exceptions import InsufficientStockError
from products.services.ledger import reconcile_product
from sales.models import Sale
from sales.services.sale_service import PaymentInfo, SaleLine, create_sale

User = get_user_model()


@unittest.skipUnless(
    connection.features.has_select_for_update and connection.vendor != "sqlite",
    "needs a database with row-level locking (SELECT ... FOR UPDATE)",
)
class ConcurrentSaleTests(TransactionTestCase):
    """
    GUARANTEES:
    - Concurrent sales on the same product never lose an update
    - Total deducted stock never exceeds what was available
    - Opposite item orders do not deadlock
    """

    def setUp(self):
        self.cashier = User.objects.create_user(username="cashier", password="pass")
        self.a = Product.objects.create(sku="A", name="A", price=Decimal("1.00"), stock_qty=10)
        self.b = Product.objects.create(sku="B", name="B", price=Decimal("1.00"), stock_qty=10)

    def _run_concurrently(self, *item_lists):
        barrier = threading.Barrier(len(item_lists))
        results = [None] * len(item_lists)

        def worker(index, items):
            try:
                barrier.wait()
                results[index] = create_sale(
                    items=items,
                    payment=PaymentInfo(method="qris"),
                    actor_id=self.cashier.pk,
                )
            except InsufficientStockError as exc:
                results[index] = exc
            finally:
                connection.close()

        threads = [
            threading.Thread(target=worker, args=(i, items))
            for i, items in enumerate(item_lists)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        return results

    def test_both_fit(self):
        results = self._run_concurrently([SaleLine(self.a.pk, 4)], [SaleLine(self.a.pk, 5)])

        self.assertTrue(all(isinstance(r, Sale) for r in results), results)
        self.a.refresh_from_db()
        self.assertEqual(self.a.stock_qty, 1)
        self.assertTrue(reconcile_product(self.a).ok)
        self.assertEqual(len({r.sale_number for r in results}), 2)

    def test_only_one_fits(self):
        results = self._run_concurrently([SaleLine(self.a.pk, 7)], [SaleLine(self.a.pk, 6)])

        sales = [r for r in results if isinstance(r, Sale)]
        failures = [r for r in results if isinstance(r, InsufficientStockError)]
        self.assertEqual((len(sales), len(failures)), (1, 1))

        self.a.refresh_from_db()
        self.assertGreaterEqual(self.a.stock_qty, 0)
        self.assertEqual(
            10 - self.a.stock_qty,
            -sum(StockMovement.objects.filter(product=self.a).values_list("quantity", flat=True)),
        )

    def test_opposite_orders_do_not_deadlock(self):
        results = self._run_concurrently(
            [SaleLine(self.a.pk, 1), SaleLine(self.b.pk, 1)],
            [SaleLine(self.b.pk, 1), SaleLine(self.a.pk, 1)],
        )

        self.assertTrue(all(isinstance(r, Sale) for r in results), results)
        self.a.refresh_from_db()
        self.b.refresh_from_db()
        self.assertEqual((self.a.stock_qty, self.b.stock_qty), (8, 8))
