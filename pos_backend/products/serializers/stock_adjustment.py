# products/serializers/stock_adjustment.py

"""
STOCK ADJUSTMENT SERIALIZERS

- StockAdjustmentCreateSerializer validates the request shape only.
  Stock rules (existence, non-negative stock) are enforced by
  products.services.stock_adjustments.create_stock_adjustment.
- StockAdjustmentSerializer renders the header with its ledger rows.
"""

from rest_framework import serializers

from products.models import StockAdjustment
from products.serializers.stock_movement import StockMovementSerializer


class AdjustmentItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity_change = serializers.IntegerField()

    def validate_quantity_change(self, value):
        if value == 0:
            raise serializers.ValidationError("quantity_change cannot be 0")
        return value


class StockAdjustmentCreateSerializer(serializers.Serializer):
    reason = serializers.ChoiceField(choices=StockAdjustment.Reason.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = AdjustmentItemInputSerializer(many=True, allow_empty=False)


class StockAdjustmentSerializer(serializers.ModelSerializer):
    movements = StockMovementSerializer(many=True, read_only=True)

    class Meta:
        model = StockAdjustment
        fields = ["id", "reason", "notes", "created_by", "created_at", "movements"]
        read_only_fields = fields
