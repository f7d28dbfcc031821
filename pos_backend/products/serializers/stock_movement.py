# products/serializers/stock_movement.py

from rest_framework import serializers

from products.models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    """Read-only ledger row (stock card line)."""

    product_name = serializers.CharField(source="product.name", read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    performed_by_username = serializers.CharField(
        source="performed_by.get_username", read_only=True
    )

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "product_name",
            "product_sku",
            "movement_type",
            "reference_type",
            "reference_id",
            "quantity",
            "stock_before",
            "stock_after",
            "performed_by",
            "performed_by_username",
            "created_at",
        ]
        read_only_fields = fields
