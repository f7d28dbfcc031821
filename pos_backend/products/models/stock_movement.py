# products/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory ledger entry ("kartu stok").

GUARANTEES:
- Append-only (no updates, no deletes)
- Created ONCE, never edited, only by products.services.stock_mutator
- quantity is signed: positive = stock in, negative = stock out
- stock_after == stock_before + quantity (DB check)
- Movement type must match its reference document
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from products.references import ReferenceType, from_columns

from .product import Product


class StockMovementQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise ValidationError("StockMovement records are immutable")

    def delete(self):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def for_reference(self, ref):
        if ref.kind == ReferenceType.NONE:
            return self.filter(reference_type=ReferenceType.NONE)
        return self.filter(reference_type=ref.kind, reference_id=ref.id)


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        PURCHASE = "purchase", "Purchase"
        SALE = "sale", "Sale"
        ADJUSTMENT = "adjustment", "Adjustment"
        SALE_CANCEL = "sale_cancel", "Sale Cancellation"

    TYPE_TO_REFERENCE = {
        MovementType.PURCHASE: ReferenceType.PURCHASE_ORDER,
        MovementType.SALE: ReferenceType.SALE,
        MovementType.SALE_CANCEL: ReferenceType.SALE,
        MovementType.ADJUSTMENT: ReferenceType.STOCK_ADJUSTMENT,
    }

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=16, choices=MovementType.choices)

    reference_type = models.CharField(
        max_length=32,
        choices=ReferenceType.choices,
        default=ReferenceType.NONE,
    )
    reference_id = models.BigIntegerField(null=True, blank=True)

    quantity = models.IntegerField(help_text="Signed change: + in, - out.")
    stock_before = models.IntegerField()
    stock_after = models.IntegerField()

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    objects = StockMovementQuerySet.as_manager()

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock_after=models.F("stock_before") + models.F("quantity")),
                name="stock_movement_after_equals_before_plus_quantity",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_before__gte=0),
                name="stock_movement_before_nonnegative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_after__gte=0),
                name="stock_movement_after_nonnegative",
            ),
            models.CheckConstraint(
                condition=~models.Q(quantity=0),
                name="stock_movement_quantity_nonzero",
            ),
        ]
        indexes = [
            models.Index(fields=["product", "created_at"], name="stockmove_product_created_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="stockmove_reference_idx"),
            models.Index(fields=["movement_type"], name="stockmove_type_idx"),
        ]

    def clean(self):
        if self.quantity == 0:
            raise ValidationError("quantity cannot be 0")

        if self.stock_after != self.stock_before + self.quantity:
            raise ValidationError("stock_after must equal stock_before + quantity")

        if self.stock_before < 0 or self.stock_after < 0:
            raise ValidationError("stock snapshots cannot be negative")

        expected_ref = self.TYPE_TO_REFERENCE.get(self.movement_type)
        if expected_ref is None:
            raise ValidationError(f"Unknown movement_type: {self.movement_type!r}")

        if self.reference_type != expected_ref or self.reference_id is None:
            raise ValidationError(
                f"{self.movement_type} movements must reference a {expected_ref}"
            )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    @property
    def reference(self):
        return from_columns(self.reference_type, self.reference_id)

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.movement_type} | {self.quantity:+d}"
