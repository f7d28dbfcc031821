# sales/models/sale_item.py

"""
SALE ITEM (IMMUTABLE SNAPSHOT)

Captures name, sku, price and cost_price at transaction time, so the
line stays correct after later catalog changes. Append-only.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product

from .sale import Sale


class SaleItem(models.Model):
    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sale_items",
    )

    product_name = models.CharField(max_length=255)
    product_sku = models.CharField(max_length=128)

    quantity = models.PositiveIntegerField()

    price = models.DecimalField(max_digits=12, decimal_places=2)
    cost_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Product cost_price at time of sale (snapshot).",
    )
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="sale_item_quantity_positive",
            ),
        ]

    def clean(self):
        if self.quantity is None or int(self.quantity) < 1:
            raise ValidationError({"quantity": "quantity must be at least 1"})

        expected = Decimal(self.price) * int(self.quantity)
        if Decimal(self.subtotal) != expected:
            raise ValidationError({"subtotal": "subtotal must equal price x quantity"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SaleItem records are immutable")

        self.full_clean(exclude=["sale", "product"])
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
