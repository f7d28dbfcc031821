# products/models/stock_adjustment.py

"""
STOCK ADJUSTMENT (OPNAME) HEADER

A manual correction batch: a physical stock count reconciled against
system stock, or a write-off of damaged / lost goods. The quantity
changes themselves live in StockMovement rows referencing this header.
"""

from django.conf import settings
from django.db import models

from products.references import StockAdjustmentRef


class StockAdjustment(models.Model):
    class Reason(models.TextChoices):
        DAMAGED = "damaged", "Damaged"
        LOST = "lost", "Lost"
        CORRECTION = "correction", "Correction"
        OTHER = "other", "Other"

    reason = models.CharField(max_length=16, choices=Reason.choices)
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="stock_adjustments",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    @property
    def movements(self):
        from .stock_movement import StockMovement

        return StockMovement.objects.for_reference(StockAdjustmentRef(self.pk))

    def __str__(self):
        return f"Adjustment #{self.pk} ({self.reason})"
