# products/tests/test_references.py

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase

from products.models import StockAdjustment
from products.references import (
    NoRef,
    PurchaseOrderRef,
    ReferenceType,
    SaleRef,
    StockAdjustmentRef,
    from_columns,
    reference_for,
    to_columns,
)

User = get_user_model()


class ReferenceColumnTests(SimpleTestCase):
    def test_columns(self):
        self.assertEqual(to_columns(SaleRef(5)), (ReferenceType.SALE, 5))
        self.assertEqual(to_columns(PurchaseOrderRef(6)), (ReferenceType.PURCHASE_ORDER, 6))
        self.assertEqual(to_columns(StockAdjustmentRef(7)), (ReferenceType.STOCK_ADJUSTMENT, 7))
        self.assertEqual(to_columns(NoRef()), (ReferenceType.NONE, None))

    def test_from_columns(self):
        self.assertEqual(from_columns("sale", 5), SaleRef(5))
        self.assertEqual(from_columns("none", None), NoRef())
        self.assertEqual(from_columns("", None), NoRef())

    def test_from_columns_rejects_bad_values(self):
        with self.assertRaises(ValueError):
            from_columns("invoice", 1)

        with self.assertRaises(ValueError):
            from_columns("sale", None)

    def test_refs_compare_by_value(self):
        self.assertEqual(SaleRef(1), SaleRef(1))
        self.assertNotEqual(SaleRef(1), PurchaseOrderRef(1))

    def test_unknown_objects_rejected(self):
        with self.assertRaises(TypeError):
            reference_for(object())

        with self.assertRaises(TypeError):
            to_columns("sale:1")


class ReferenceForModelTests(TestCase):
    def test_saved_adjustment(self):
        user = User.objects.create_user(username="ref", password="password123")
        adjustment = StockAdjustment.objects.create(reason="other", created_by=user)

        self.assertEqual(reference_for(adjustment), StockAdjustmentRef(adjustment.pk))
        self.assertEqual(reference_for(None), NoRef())

    def test_unsaved_document_rejected(self):
        with self.assertRaises(ValueError):
            reference_for(StockAdjustment(reason="other"))
