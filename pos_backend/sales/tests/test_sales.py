# sales/tests/test_sales.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from products.models import Product, StockMovement
from products.references import SaleRef
from products.services.exceptions import InsufficientStockError, ProductNotFoundError
from products.services.ledger import movements_for_reference, reconcile_product
from sales.models import Sale, SaleItem
from sales.services.exceptions import EmptySaleError, InsufficientPaymentError
from sales.services.sale_service import PaymentInfo, SaleLine, create_sale

User = get_user_model()


class CreateSaleTests(TestCase):
    """
    Checkout tests.

    GUARANTEES:
    - A sale deducts stock with one ledger row per item
    - A sale is all-or-nothing across its items
    - Totals and payment status are computed by the backend
    - Item snapshots survive later catalog changes
    """

    def setUp(self):
        self.cashier = User.objects.create_user(username="cashier", password="pass")

        self.product = Product.objects.create(
            sku="SKU-100",
            name="Cola 330ml",
            price=Decimal("100.00"),
            cost_price=Decimal("70.00"),
            stock_qty=10,
        )

    def _sale(self, items, **payment):
        payment.setdefault("method", "cash")
        return create_sale(
            items=items,
            payment=PaymentInfo(**payment),
            actor_id=self.cashier.pk,
        )

    # =====================================================
    # HAPPY PATH
    # =====================================================

    def test_cash_sale_deducts_stock_and_writes_movement(self):
        sale = self._sale([SaleLine(self.product.pk, 2)], cash_given=Decimal("200.00"))

        self.assertEqual(sale.total_amount, Decimal("200.00"))
        self.assertEqual(sale.status, Sale.STATUS_COMPLETED)
        self.assertEqual(sale.payment_status, Sale.PAYMENT_PAID)
        self.assertEqual(sale.change_return, Decimal("0.00"))

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 8)

        movement = StockMovement.objects.get(product=self.product)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.SALE)
        self.assertEqual(movement.quantity, -2)
        self.assertEqual((movement.stock_before, movement.stock_after), (10, 8))
        self.assertEqual(movement.reference, SaleRef(sale.pk))
        self.assertEqual(movement.performed_by, self.cashier)

    def test_change_is_returned(self):
        sale = self._sale([SaleLine(self.product.pk, 1)], cash_given=Decimal("150.00"))

        self.assertEqual(sale.change_return, Decimal("50.00"))
        self.assertEqual(sale.cash_given, Decimal("150.00"))

    def test_cash_without_cash_given_is_unpaid(self):
        sale = self._sale([SaleLine(self.product.pk, 1)])
        self.assertEqual(sale.payment_status, Sale.PAYMENT_UNPAID)

    def test_non_cash_methods_are_paid(self):
        for method in ("qris", "debit", "credit"):
            sale = self._sale([SaleLine(self.product.pk, 1)], method=method)
            self.assertEqual(sale.payment_status, Sale.PAYMENT_PAID)
            self.assertEqual(sale.payment_method, method)

    def test_tax_and_discount(self):
        sale = self._sale(
            [SaleLine(self.product.pk, 3)],
            method="qris",
            tax_amount=Decimal("30.00"),
            discount_amount=Decimal("10.00"),
        )

        self.assertEqual(sale.subtotal, Decimal("300.00"))
        self.assertEqual(sale.total_amount, Decimal("320.00"))

    def test_sale_item_snapshot(self):
        sale = self._sale([SaleLine(self.product.pk, 2)], method="debit")

        Product.objects.filter(pk=self.product.pk).update(
            name="Renamed", price=Decimal("999.00"), cost_price=Decimal("1.00")
        )

        item = SaleItem.objects.get(sale=sale)
        self.assertEqual(item.product_name, "Cola 330ml")
        self.assertEqual(item.product_sku, "SKU-100")
        self.assertEqual(item.price, Decimal("100.00"))
        self.assertEqual(item.cost_price, Decimal("70.00"))
        self.assertEqual(item.subtotal, Decimal("200.00"))

    def test_duplicate_lines_are_merged(self):
        sale = self._sale(
            [SaleLine(self.product.pk, 1), {"product_id": self.product.pk, "quantity": 2}],
            method="qris",
        )

        self.assertEqual(sale.items.count(), 1)
        self.assertEqual(sale.items.get().quantity, 3)
        self.assertEqual(StockMovement.objects.filter(product=self.product).count(), 1)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 7)

    def test_sale_numbers_are_sequential_per_day(self):
        first = self._sale([SaleLine(self.product.pk, 1)], method="qris")
        second = self._sale([SaleLine(self.product.pk, 1)], method="qris")

        today = timezone.localdate().strftime("%Y%m%d")
        self.assertEqual(first.sale_number, f"TRX-{today}-0001")
        self.assertEqual(second.sale_number, f"TRX-{today}-0002")

    def test_ledger_reconciles_after_sales(self):
        self._sale([SaleLine(self.product.pk, 4)], method="qris")
        self._sale([SaleLine(self.product.pk, 6)], method="qris")

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 0)
        self.assertTrue(reconcile_product(self.product).ok)

    # =====================================================
    # REJECTIONS
    # =====================================================

    def test_insufficient_stock(self):
        low = Product.objects.create(sku="LOW", name="Low", price=Decimal("10.00"), stock_qty=5)

        with self.assertRaises(InsufficientStockError) as ctx:
            self._sale([SaleLine(low.pk, 10)], method="qris")

        self.assertEqual(ctx.exception.requested, 10)
        self.assertEqual(ctx.exception.available, 5)

        low.refresh_from_db()
        self.assertEqual(low.stock_qty, 5)
        self.assertFalse(Sale.objects.exists())

    def test_third_item_failure_rolls_back_first_two(self):
        a = Product.objects.create(sku="A", name="A", price=Decimal("1.00"), stock_qty=10)
        b = Product.objects.create(sku="B", name="B", price=Decimal("1.00"), stock_qty=10)
        c = Product.objects.create(sku="C", name="C", price=Decimal("1.00"), stock_qty=1)

        with self.assertRaises(InsufficientStockError):
            self._sale(
                [SaleLine(a.pk, 2), SaleLine(b.pk, 3), SaleLine(c.pk, 5)],
                method="qris",
            )

        for product, qty in ((a, 10), (b, 10), (c, 1)):
            product.refresh_from_db()
            self.assertEqual(product.stock_qty, qty)

        self.assertFalse(Sale.objects.exists())
        self.assertFalse(SaleItem.objects.exists())
        self.assertFalse(StockMovement.objects.exists())

    def test_insufficient_payment_rolls_back(self):
        with self.assertRaises(InsufficientPaymentError) as ctx:
            self._sale([SaleLine(self.product.pk, 2)], cash_given=Decimal("150.00"))

        self.assertEqual(ctx.exception.total, Decimal("200.00"))
        self.assertEqual(ctx.exception.cash_given, Decimal("150.00"))

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 10)
        self.assertFalse(StockMovement.objects.exists())

    def test_failed_sale_does_not_consume_a_number(self):
        with self.assertRaises(InsufficientPaymentError):
            self._sale([SaleLine(self.product.pk, 2)], cash_given=Decimal("1.00"))

        sale = self._sale([SaleLine(self.product.pk, 1)], method="qris")
        self.assertTrue(sale.sale_number.endswith("-0001"))

    def test_unknown_product(self):
        with self.assertRaises(ProductNotFoundError):
            self._sale([SaleLine(999999, 1)], method="qris")

    def test_inactive_product_cannot_be_sold(self):
        self.product.is_active = False
        self.product.save(update_fields=["is_active"])

        with self.assertRaises(ProductNotFoundError):
            self._sale([SaleLine(self.product.pk, 1)], method="qris")

    def test_empty_sale(self):
        with self.assertRaises(EmptySaleError):
            self._sale([], method="qris")

    def test_invalid_input(self):
        bad_calls = [
            dict(items=[SaleLine(self.product.pk, 0)], method="qris"),
            dict(items=[SaleLine(self.product.pk, 1.5)], method="qris"),
            dict(items=[SaleLine(self.product.pk, 1)], method="bitcoin"),
            dict(items=[SaleLine(self.product.pk, 1)], method="qris", discount_amount=Decimal("-1")),
            dict(items=[SaleLine(self.product.pk, 1)], method="qris", discount_amount=Decimal("500")),
        ]

        for kwargs in bad_calls:
            items = kwargs.pop("items")
            with self.assertRaises(ValueError):
                self._sale(items, **kwargs)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 10)
        self.assertFalse(Sale.objects.exists())

    def test_movements_for_sale_reference(self):
        sale = self._sale([SaleLine(self.product.pk, 2)], method="qris")

        self.assertEqual(
            list(movements_for_reference(SaleRef(sale.pk)).values_list("quantity", flat=True)),
            [-2],
        )


class SaleImmutabilityTests(TestCase):
    """
    GUARANTEES:
    - Financial fields cannot change after the sale is recorded
    - Sales and their items cannot be deleted / edited
    """

    def setUp(self):
        cashier = User.objects.create_user(username="cashier2", password="pass")
        product = Product.objects.create(sku="X", name="X", price=Decimal("5.00"), stock_qty=5)
        self.sale = create_sale(
            items=[SaleLine(product.pk, 1)],
            payment=PaymentInfo(method="qris"),
            actor_id=cashier.pk,
        )

    def test_totals_are_immutable(self):
        self.sale.total_amount = Decimal("999.00")
        with self.assertRaises(ValueError):
            self.sale.save()

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.total_amount, Decimal("5.00"))

    def test_cancelled_cannot_return_to_completed(self):
        Sale.objects.filter(pk=self.sale.pk).update(status=Sale.STATUS_CANCELLED)
        self.sale.refresh_from_db()

        self.sale.status = Sale.STATUS_COMPLETED
        with self.assertRaises(ValueError):
            self.sale.save()

    def test_sale_cannot_be_deleted(self):
        with self.assertRaises(ValidationError):
            self.sale.delete()

    def test_items_are_immutable(self):
        item = self.sale.items.get()
        item.quantity = 3
        with self.assertRaises(ValidationError):
            item.save()
