# products/models/product.py

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .category import Category


class ProductQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def low_stock(self):
        return self.filter(stock_qty__lte=models.F("min_stock"))

    def in_stock(self):
        return self.filter(stock_qty__gt=0)

    def out_of_stock(self):
        return self.filter(stock_qty__lte=0)


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL (IMPORTANT):
    - stock_qty is the on-hand quantity and is NEVER negative (DB check)
    - stock_qty is written ONLY by products.services.stock_mutator, under a
      row lock, together with a StockMovement ledger row
    - cost_price follows last-cost valuation (overwritten on purchase receipt)
    """

    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="products",
    )

    sku = models.CharField(max_length=128, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    price = models.DecimalField(max_digits=12, decimal_places=2)
    cost_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Last purchase unit cost (last-cost valuation).",
    )

    stock_qty = models.IntegerField(default=0, editable=False)
    min_stock = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock_qty__gte=0),
                name="product_stock_qty_nonnegative",
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=Decimal("0.00")),
                name="product_price_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
            models.Index(fields=["is_active"], name="product_is_active_idx"),
            models.Index(fields=["stock_qty"], name="product_stock_qty_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if not (self.sku or "").strip():
            raise ValidationError({"sku": "sku is required"})

        if self.price is None or Decimal(self.price) < Decimal("0.00"):
            raise ValidationError({"price": "price cannot be negative"})

        if self.cost_price is not None and Decimal(self.cost_price) < Decimal("0.00"):
            raise ValidationError({"cost_price": "cost_price cannot be negative"})

        if self.stock_qty is None or int(self.stock_qty) < 0:
            raise ValidationError({"stock_qty": "stock_qty cannot be negative"})

    @property
    def is_low_stock(self) -> bool:
        return int(self.stock_qty) <= int(self.min_stock)

    @property
    def is_in_stock(self) -> bool:
        return int(self.stock_qty) > 0
