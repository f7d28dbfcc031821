# sales/serializers/sale.py

from rest_framework import serializers

from sales.models import Sale
from sales.serializers.sale_item import SaleItemSerializer


class SaleSerializer(serializers.ModelSerializer):
    """Sale header + items (read-only)."""

    items = SaleItemSerializer(many=True, read_only=True)
    created_by_username = serializers.CharField(
        source="created_by.get_username", read_only=True, default=None
    )

    class Meta:
        model = Sale
        fields = [
            "id",
            "sale_number",
            "status",
            "payment_status",
            "payment_method",
            "subtotal",
            "tax_amount",
            "discount_amount",
            "total_amount",
            "cash_given",
            "change_return",
            "notes",
            "created_by",
            "created_by_username",
            "cancelled_at",
            "cancelled_by",
            "created_at",
            "items",
        ]
        read_only_fields = fields


class SaleLineInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class SaleCreateSerializer(serializers.Serializer):
    """
    Checkout payload. Shape only: stock, prices and payment
    sufficiency are decided by sales.services.sale_service.create_sale.
    """

    items = SaleLineInputSerializer(many=True, allow_empty=False)
    payment_method = serializers.ChoiceField(choices=Sale.PAYMENT_METHOD_CHOICES)
    cash_given = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
        default=None,
    )
    discount_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, default=0
    )
    tax_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, default=0
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
