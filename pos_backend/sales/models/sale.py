# sales/models/sale.py

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Represents a completed POS transaction.

    GUARANTEES:
    - Created atomically with its items and one StockMovement per item
    - Financial fields are immutable once written
    - The only status change is COMPLETED -> CANCELLED (once)
    - Never deleted: cancel instead, the ledger keeps pointing at it
    """

    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_UNPAID = "unpaid"
    PAYMENT_PAID = "paid"
    PAYMENT_REFUND = "refund"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_UNPAID, "Unpaid"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_REFUND, "Refund"),
    ]

    METHOD_CASH = "cash"
    METHOD_QRIS = "qris"
    METHOD_DEBIT = "debit"
    METHOD_CREDIT = "credit"

    PAYMENT_METHOD_CHOICES = [
        (METHOD_CASH, "Cash"),
        (METHOD_QRIS, "QRIS"),
        (METHOD_DEBIT, "Debit"),
        (METHOD_CREDIT, "Credit"),
    ]

    sale_number = models.CharField(
        max_length=32,
        unique=True,
        help_text="TRX-YYYYMMDD-NNNN, issued by the per-day document counter",
    )

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_COMPLETED,
    )
    payment_status = models.CharField(
        max_length=16,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_UNPAID,
    )
    payment_method = models.CharField(
        max_length=16,
        choices=PAYMENT_METHOD_CHOICES,
        default=METHOD_CASH,
    )

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    cash_given = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    change_return = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sales",
        help_text="Cashier / staff who processed the sale",
    )

    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cancelled_sales",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=Decimal("0.00")),
                name="sale_total_amount_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["created_at"], name="sale_created_at_idx"),
            models.Index(fields=["status"], name="sale_status_idx"),
        ]

    _IMMUTABLE_FIELDS = (
        "sale_number",
        "payment_method",
        "subtotal",
        "tax_amount",
        "discount_amount",
        "total_amount",
        "cash_given",
        "change_return",
        "created_by_id",
    )

    def _validate_immutable(self, previous: "Sale"):
        if self.status != previous.status and not (
            previous.status == self.STATUS_COMPLETED
            and self.status == self.STATUS_CANCELLED
        ):
            raise ValueError(
                f"Sale status change {previous.status} -> {self.status} is not allowed."
            )

        for field in self._IMMUTABLE_FIELDS:
            if getattr(self, field) != getattr(previous, field):
                raise ValueError(
                    f"Sale is immutable once recorded. Field '{field}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = type(self).objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Sales cannot be deleted. Cancel the sale instead.")

    @property
    def is_cancelled(self) -> bool:
        return self.status == self.STATUS_CANCELLED

    def __str__(self):
        return f"{self.sale_number} | {self.total_amount}"
