# purchases/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from products.models import Product
from purchases.models import PurchaseOrder, Supplier

User = get_user_model()


class PurchaseApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="buyer", password="pass")
        self.client.force_authenticate(self.user)

        self.supplier = Supplier.objects.create(name="PT Sumber Makmur")
        self.product = Product.objects.create(
            sku="SKU-1",
            name="Rice 5kg",
            price=Decimal("75.00"),
            cost_price=Decimal("50.00"),
            stock_qty=10,
        )

    def _create_order(self, **extra):
        payload = {
            "supplier_id": self.supplier.pk,
            "items": [
                {"product_id": self.product.pk, "quantity": 20, "unit_cost": "60.00"}
            ],
        }
        payload.update(extra)
        return self.client.post("/api/purchases/orders/", payload, format="json")

    def test_suppliers_list_and_create(self):
        res = self.client.post(
            "/api/purchases/suppliers/",
            {"name": "CV Aneka", "phone": "0812"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)

        res = self.client.get("/api/purchases/suppliers/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([s["name"] for s in res.data], ["CV Aneka", "PT Sumber Makmur"])

    def test_supplier_retrieve_and_update(self):
        url = f"/api/purchases/suppliers/{self.supplier.pk}/"

        res = self.client.get(url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["name"], "PT Sumber Makmur")

        res = self.client.patch(url, {"phone": "021-555"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["phone"], "021-555")
        self.assertEqual(res.data["name"], "PT Sumber Makmur")

    def test_deactivated_supplier_hidden_from_list(self):
        self.client.patch(
            f"/api/purchases/suppliers/{self.supplier.pk}/",
            {"is_active": False},
            format="json",
        )

        res = self.client.get("/api/purchases/suppliers/")
        self.assertEqual(res.data, [])

        res = self.client.get("/api/purchases/suppliers/?include_inactive=1")
        self.assertEqual(len(res.data), 1)

    def test_delete_supplier_without_orders(self):
        res = self.client.delete(f"/api/purchases/suppliers/{self.supplier.pk}/")

        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Supplier.objects.filter(pk=self.supplier.pk).exists())

    def test_delete_supplier_with_orders_is_409(self):
        self._create_order()

        res = self.client.delete(f"/api/purchases/suppliers/{self.supplier.pk}/")

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(Supplier.objects.filter(pk=self.supplier.pk).exists())

    def test_unknown_supplier_is_404(self):
        url = "/api/purchases/suppliers/999999/"

        for res in (
            self.client.get(url),
            self.client.patch(url, {"phone": "1"}, format="json"),
            self.client.delete(url),
        ):
            self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
            self.assertEqual(res.data["error"], "SupplierNotFoundError")

    def test_create_order(self):
        res = self._create_order(notes="urgent")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["status"], "pending")
        self.assertEqual(res.data["supplier_name"], "PT Sumber Makmur")
        self.assertEqual(res.data["total_amount"], "1200.00")
        self.assertEqual(res.data["items"][0]["subtotal"], "1200.00")

    def test_create_order_unknown_supplier_is_404(self):
        res = self._create_order(supplier_id=999999)

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"], "SupplierNotFoundError")

    def test_create_order_without_items_is_400(self):
        res = self._create_order(items=[])

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_receive_order(self):
        po_id = self._create_order().data["id"]

        res = self.client.post(f"/api/purchases/orders/{po_id}/receive/")

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], "received")

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 30)
        self.assertEqual(self.product.cost_price, Decimal("60.00"))

    def test_receive_twice_is_409(self):
        po_id = self._create_order().data["id"]
        self.client.post(f"/api/purchases/orders/{po_id}/receive/")

        res = self.client.post(f"/api/purchases/orders/{po_id}/receive/")

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"], "AlreadyReceivedError")

    def test_order_then_cancel_is_409(self):
        po_id = self._create_order().data["id"]

        res = self.client.post(f"/api/purchases/orders/{po_id}/order/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "ordered")

        res = self.client.post(f"/api/purchases/orders/{po_id}/cancel/")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["current_status"], "ordered")

    def test_cancel_then_receive_is_409(self):
        po_id = self._create_order().data["id"]

        res = self.client.post(f"/api/purchases/orders/{po_id}/cancel/")
        self.assertEqual(res.data["status"], "cancelled")

        res = self.client.post(f"/api/purchases/orders/{po_id}/receive/")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"], "CannotReceiveCancelledError")

    def test_unknown_order_is_404(self):
        self.assertEqual(
            self.client.get("/api/purchases/orders/999999/").status_code,
            status.HTTP_404_NOT_FOUND,
        )
        self.assertEqual(
            self.client.post("/api/purchases/orders/999999/receive/").status_code,
            status.HTTP_404_NOT_FOUND,
        )

    def test_list_and_filter_orders(self):
        self._create_order()
        second = self._create_order().data["id"]
        self.client.post(f"/api/purchases/orders/{second}/cancel/")

        res = self.client.get("/api/purchases/orders/")
        self.assertEqual(res.data["count"], 2)

        res = self.client.get("/api/purchases/orders/", {"status": "cancelled"})
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["id"], second)

        self.assertEqual(
            PurchaseOrder.objects.filter(status=PurchaseOrder.STATUS_PENDING).count(), 1
        )

    def test_requires_authentication(self):
        self.client.force_authenticate(None)

        res = self.client.get("/api/purchases/orders/")

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
