# sales/tests/test_cancellation.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase

from products.models import Product, StockMovement
from products.services.ledger import reconcile_product
from products.services.stock_transaction import StockTransaction
from sales.models import Sale, SaleItem
from sales.services.exceptions import AlreadyCancelledError, SaleNotFoundError
from sales.services.sale_cancellation import cancel_sale
from sales.services.sale_lifecycle import can_transition
from sales.services.sale_service import PaymentInfo, SaleLine, create_sale

User = get_user_model()


class RecordingTransaction(StockTransaction):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.lock_calls = []

    def lock_product(self, product_id):
        self.lock_calls.append(int(product_id))
        return super().lock_product(product_id)


class CancelSaleTests(TestCase):
    """
    Cancellation tests.

    GUARANTEES:
    - Cancelling restores stock through the ledger (SALE_CANCEL rows)
    - A sale can be cancelled exactly once
    - The cancellation is annotated with actor + timestamp
    """

    def setUp(self):
        self.cashier = User.objects.create_user(username="cashier", password="pass")
        self.supervisor = User.objects.create_user(username="supervisor", password="pass")

        self.product = Product.objects.create(
            sku="SKU-1", name="Chips", price=Decimal("11.00"), stock_qty=10
        )

    def _sale(self, items):
        return create_sale(
            items=items,
            payment=PaymentInfo(method="qris", notes="walk-in"),
            actor_id=self.cashier.pk,
        )

    def test_cancel_restores_stock(self):
        sale = self._sale([SaleLine(self.product.pk, 5)])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 5)

        cancelled = cancel_sale(sale_id=sale.pk, actor_id=self.supervisor.pk)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 10)
        self.assertEqual(cancelled.status, Sale.STATUS_CANCELLED)
        self.assertEqual(cancelled.cancelled_by, self.supervisor)
        self.assertIsNotNone(cancelled.cancelled_at)

    def test_cancel_after_restock_adds_back_on_top(self):
        sale = self._sale([SaleLine(self.product.pk, 5)])
        Product.objects.filter(pk=self.product.pk).update(stock_qty=10)

        cancel_sale(sale_id=sale.pk, actor_id=self.supervisor.pk)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 15)

    def test_cancel_writes_sale_cancel_movement(self):
        sale = self._sale([SaleLine(self.product.pk, 3)])

        cancel_sale(sale_id=sale.pk, actor_id=self.supervisor.pk)

        movement = StockMovement.objects.get(
            movement_type=StockMovement.MovementType.SALE_CANCEL
        )
        self.assertEqual(movement.quantity, 3)
        self.assertEqual((movement.stock_before, movement.stock_after), (7, 10))
        self.assertEqual(movement.reference_id, sale.pk)
        self.assertEqual(movement.performed_by, self.supervisor)

        self.product.refresh_from_db()
        self.assertTrue(reconcile_product(self.product).ok)

    def test_second_cancel_fails_and_leaves_stock_alone(self):
        sale = self._sale([SaleLine(self.product.pk, 5)])
        cancel_sale(sale_id=sale.pk, actor_id=self.supervisor.pk)

        with self.assertRaises(AlreadyCancelledError):
            cancel_sale(sale_id=sale.pk, actor_id=self.supervisor.pk)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 10)
        self.assertEqual(
            StockMovement.objects.filter(movement_type="sale_cancel").count(), 1
        )

    def test_notes_annotation(self):
        sale = self._sale([SaleLine(self.product.pk, 1)])

        cancelled = cancel_sale(sale_id=sale.pk, actor_id=self.supervisor.pk)

        first_line, annotation = cancelled.notes.split("\n")
        self.assertEqual(first_line, "walk-in")
        self.assertTrue(
            annotation.startswith(f"[Cancelled by user {self.supervisor.pk} at ")
        )
        self.assertIn(cancelled.cancelled_at.isoformat(), annotation)

    def test_missing_sale(self):
        with self.assertRaises(SaleNotFoundError):
            cancel_sale(sale_id=999999, actor_id=self.supervisor.pk)

    def test_line_without_product_is_skipped(self):
        other = Product.objects.create(sku="SKU-2", name="Gum", price=Decimal("2.00"), stock_qty=4)
        sale = self._sale([SaleLine(self.product.pk, 2), SaleLine(other.pk, 1)])

        SaleItem.objects.filter(sale=sale, product=other).update(product=None)

        with self.assertLogs("sales", level="WARNING"):
            cancel_sale(sale_id=sale.pk, actor_id=self.supervisor.pk)

        self.product.refresh_from_db()
        other.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 10)
        self.assertEqual(other.stock_qty, 3)

    def test_cancel_locks_products_in_ascending_order(self):
        a = Product.objects.create(sku="A", name="A", price=Decimal("1.00"), stock_qty=5)
        b = Product.objects.create(sku="B", name="B", price=Decimal("1.00"), stock_qty=5)
        sale = self._sale([SaleLine(b.pk, 1), SaleLine(a.pk, 1), SaleLine(self.product.pk, 1)])

        with RecordingTransaction() as txn:
            cancel_sale(sale_id=sale.pk, actor_id=self.supervisor.pk, txn=txn)
            self.assertEqual(txn.lock_calls, sorted([a.pk, b.pk, self.product.pk]))

    def test_create_sale_locks_products_in_ascending_order(self):
        a = Product.objects.create(sku="A", name="A", price=Decimal("1.00"), stock_qty=5)
        b = Product.objects.create(sku="B", name="B", price=Decimal("1.00"), stock_qty=5)

        with RecordingTransaction() as txn:
            create_sale(
                items=[SaleLine(b.pk, 1), SaleLine(self.product.pk, 1), SaleLine(a.pk, 1)],
                payment=PaymentInfo(method="qris"),
                actor_id=self.cashier.pk,
                txn=txn,
            )
            self.assertEqual(txn.lock_calls, sorted([a.pk, b.pk, self.product.pk]))

    def test_lifecycle_rules(self):
        self.assertTrue(
            can_transition(from_status=Sale.STATUS_COMPLETED, to_status=Sale.STATUS_CANCELLED)
        )
        self.assertFalse(
            can_transition(from_status=Sale.STATUS_CANCELLED, to_status=Sale.STATUS_COMPLETED)
        )
        self.assertFalse(
            can_transition(from_status=Sale.STATUS_CANCELLED, to_status=Sale.STATUS_CANCELLED)
        )
