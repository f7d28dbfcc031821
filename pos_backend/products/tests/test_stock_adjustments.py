# products/tests/test_stock_adjustments.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase

from products.models import Product, StockAdjustment, StockMovement
from products.services.exceptions import InsufficientStockError, ProductNotFoundError
from products.services.stock_adjustments import AdjustmentLine, create_stock_adjustment

User = get_user_model()


class StockAdjustmentServiceTests(TestCase):
    """
    Stock opname tests.

    GUARANTEES:
    - Every item is applied with one ledger row pointing at the header
    - A batch is all-or-nothing (missing product / insufficient stock)
    - Invalid input is rejected before anything is written
    """

    def setUp(self):
        self.user = User.objects.create_user(username="opname", password="password123")

        self.cola = Product.objects.create(
            name="Cola", sku="COLA", price=Decimal("8000.00"), stock_qty=20
        )
        self.chips = Product.objects.create(
            name="Chips", sku="CHIPS", price=Decimal("11000.00"), stock_qty=4
        )

    def test_batch_applies_every_line(self):
        adjustment = create_stock_adjustment(
            reason=StockAdjustment.Reason.DAMAGED,
            notes="  dropped crate  ",
            items=[
                AdjustmentLine(self.cola.pk, -3),
                {"product_id": self.chips.pk, "quantity_change": 6},
            ],
            actor_id=self.user.pk,
        )

        self.cola.refresh_from_db()
        self.chips.refresh_from_db()
        self.assertEqual(self.cola.stock_qty, 17)
        self.assertEqual(self.chips.stock_qty, 10)

        self.assertEqual(adjustment.notes, "dropped crate")
        self.assertEqual(adjustment.created_by, self.user)

        movements = list(adjustment.movements.order_by("id"))
        self.assertEqual(len(movements), 2)
        self.assertEqual(
            [(m.product_id, m.quantity, m.movement_type) for m in movements],
            [
                (self.cola.pk, -3, StockMovement.MovementType.ADJUSTMENT),
                (self.chips.pk, 6, StockMovement.MovementType.ADJUSTMENT),
            ],
        )

    def test_same_product_twice_chains_snapshots(self):
        adjustment = create_stock_adjustment(
            reason="correction",
            items=[AdjustmentLine(self.chips.pk, 2), AdjustmentLine(self.chips.pk, -5)],
            actor_id=self.user.pk,
        )

        movements = list(adjustment.movements.order_by("id"))
        self.assertEqual(
            [(m.stock_before, m.stock_after) for m in movements],
            [(4, 6), (6, 1)],
        )

        self.chips.refresh_from_db()
        self.assertEqual(self.chips.stock_qty, 1)

    def test_missing_product_rolls_back_whole_batch(self):
        with self.assertRaises(ProductNotFoundError):
            create_stock_adjustment(
                reason="lost",
                items=[AdjustmentLine(self.cola.pk, -1), AdjustmentLine(999999, -1)],
                actor_id=self.user.pk,
            )

        self.cola.refresh_from_db()
        self.assertEqual(self.cola.stock_qty, 20)
        self.assertFalse(StockAdjustment.objects.exists())
        self.assertFalse(StockMovement.objects.exists())

    def test_insufficient_stock_rolls_back_whole_batch(self):
        with self.assertRaises(InsufficientStockError):
            create_stock_adjustment(
                reason="lost",
                items=[AdjustmentLine(self.cola.pk, -1), AdjustmentLine(self.chips.pk, -5)],
                actor_id=self.user.pk,
            )

        self.cola.refresh_from_db()
        self.chips.refresh_from_db()
        self.assertEqual((self.cola.stock_qty, self.chips.stock_qty), (20, 4))
        self.assertFalse(StockAdjustment.objects.exists())
        self.assertFalse(StockMovement.objects.exists())

    def test_invalid_reason_rejected(self):
        with self.assertRaises(ValueError):
            create_stock_adjustment(
                reason="stolen-by-aliens",
                items=[AdjustmentLine(self.cola.pk, 1)],
                actor_id=self.user.pk,
            )

    def test_empty_items_rejected(self):
        with self.assertRaises(ValueError):
            create_stock_adjustment(reason="other", items=[], actor_id=self.user.pk)

        self.assertFalse(StockAdjustment.objects.exists())

    def test_zero_or_fractional_change_rejected_before_any_write(self):
        for bad in (0, 1.5, True, "abc", None):
            with self.assertRaises(ValueError):
                create_stock_adjustment(
                    reason="other",
                    items=[
                        AdjustmentLine(self.cola.pk, 2),
                        {"product_id": self.chips.pk, "quantity_change": bad},
                    ],
                    actor_id=self.user.pk,
                )

        self.cola.refresh_from_db()
        self.assertEqual(self.cola.stock_qty, 20)
        self.assertFalse(StockAdjustment.objects.exists())
