# products/tests/test_products.py

from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from django.test import TestCase

from products.models import Category, Product


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - Products can be created safely
    - SKU uniqueness is enforced
    - Stock can never be stored below zero
    - Pricing is sane
    """

    def setUp(self):
        self.category = Category.objects.create(name="Beverages")

    def test_product_creation_starts_with_zero_stock(self):
        product = Product.objects.create(
            category=self.category,
            name="Cola 330ml",
            sku="BEV-COLA-330",
            price=Decimal("8000.00"),
        )

        self.assertEqual(product.stock_qty, 0)
        self.assertFalse(product.is_in_stock)
        self.assertTrue(product.is_active)

    def test_sku_must_be_unique(self):
        Product.objects.create(name="Tea", sku="BEV-TEA", price=Decimal("5000.00"))

        with self.assertRaises(IntegrityError):
            Product.objects.create(name="Tea Duplicate", sku="BEV-TEA", price=Decimal("5200.00"))

    def test_negative_stock_rejected_by_database(self):
        product = Product.objects.create(name="Chips", sku="SNK-1", price=Decimal("1.00"))

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Product.objects.filter(pk=product.pk).update(stock_qty=-1)

    def test_negative_price_rejected_by_database(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Product.objects.create(name="Bad", sku="BAD-1", price=Decimal("-1.00"))

    def test_low_stock_helpers(self):
        low = Product.objects.create(
            name="Soap", sku="HH-SOAP", price=Decimal("1.00"), stock_qty=2, min_stock=5
        )
        ok = Product.objects.create(
            name="Shampoo", sku="PC-SHAMPOO", price=Decimal("1.00"), stock_qty=20, min_stock=5
        )
        empty = Product.objects.create(name="Gum", sku="SNK-GUM", price=Decimal("1.00"))

        self.assertTrue(low.is_low_stock)
        self.assertFalse(ok.is_low_stock)

        self.assertEqual(
            set(Product.objects.low_stock().values_list("sku", flat=True)),
            {"HH-SOAP", "SNK-GUM"},
        )
        self.assertEqual(
            set(Product.objects.in_stock().values_list("sku", flat=True)),
            {"HH-SOAP", "PC-SHAMPOO"},
        )
        self.assertEqual(list(Product.objects.out_of_stock()), [empty])

    def test_category_str_and_protect(self):
        Product.objects.create(
            category=self.category, name="Cola", sku="COLA", price=Decimal("1.00")
        )

        self.assertEqual(str(self.category), "Beverages")
        with self.assertRaises(ProtectedError):
            with transaction.atomic():
                self.category.delete()
