# purchases/models.py

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES)


User = settings.AUTH_USER_MODEL


class Supplier(models.Model):
    """
    Supplier master.
    """

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="supplier_name_idx"),
            models.Index(fields=["is_active"], name="supplier_is_active_idx"),
        ]

    def __str__(self):
        return self.name


class PurchaseOrder(models.Model):
    """
    Purchase order header.

    Lifecycle (purchases.services.purchase_lifecycle):
        pending -> ordered -> received
        pending -> received
        pending -> cancelled

    Receiving is performed by purchases.services.receiving_service:
    - stock is added through the stock mutator (PURCHASE movements)
    - product cost_price is overwritten with the item unit_cost
    """

    STATUS_PENDING = "pending"
    STATUS_ORDERED = "ordered"
    STATUS_RECEIVED = "received"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ORDERED, "Ordered"),
        (STATUS_RECEIVED, "Received"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="purchase_orders",
    )

    purchase_number = models.CharField(
        max_length=32,
        unique=True,
        help_text="PO-YYYYMMDD-NNNN, issued by the per-day document counter",
    )

    status = models.CharField(
        max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING
    )

    ordered_at = models.DateField(null=True, blank=True)
    expected_delivery_date = models.DateField(null=True, blank=True)
    received_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_orders_created",
    )
    received_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_orders_received",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="po_status_created_idx"),
            models.Index(fields=["supplier", "created_at"], name="po_supplier_created_idx"),
        ]

    def clean(self):
        if not (self.purchase_number or "").strip():
            raise ValidationError({"purchase_number": "purchase_number is required"})

        if self.status == self.STATUS_RECEIVED and not self.received_at:
            raise ValidationError(
                {"received_at": "received_at is required when status is received"}
            )

        if self.status != self.STATUS_RECEIVED and self.received_at:
            raise ValidationError(
                {"received_at": "received_at must be empty unless status is received"}
            )

    def save(self, *args, **kwargs):
        if self.purchase_number is not None:
            self.purchase_number = self.purchase_number.strip()

        self.full_clean(exclude=["supplier", "created_by", "received_by"])
        return super().save(*args, **kwargs)

    @property
    def total_amount(self) -> Decimal:
        return _money(sum((item.subtotal for item in self.items.all()), Decimal("0.00")))

    def __str__(self):
        return self.purchase_number


class PurchaseOrderItem(models.Model):
    """
    Purchase order line. subtotal = quantity x unit_cost.
    """

    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="purchase_order_items",
    )

    quantity = models.PositiveIntegerField()
    unit_cost = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    subtotal = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="po_item_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=models.Q(unit_cost__gte=Decimal("0.00")),
                name="po_item_unit_cost_nonnegative",
            ),
        ]

    def clean(self):
        if self.quantity is None or int(self.quantity) < 1:
            raise ValidationError({"quantity": "quantity must be at least 1"})

        if self.unit_cost is None or Decimal(self.unit_cost) < Decimal("0.00"):
            raise ValidationError({"unit_cost": "unit_cost cannot be negative"})

    def save(self, *args, **kwargs):
        self.subtotal = _money(Decimal(str(self.quantity)) * Decimal(str(self.unit_cost)))
        self.full_clean(exclude=["purchase_order", "product"])
        return super().save(*args, **kwargs)

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} x {self.quantity}"
