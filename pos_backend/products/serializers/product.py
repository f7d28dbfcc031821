# products/serializers/product.py

"""
PRODUCT SERIALIZER

Rules:
- stock_qty is READ-ONLY here. Stock only changes through a purchase
  receipt, a sale, a sale cancellation or a stock adjustment.
- cost_price is read-only as well (last-cost valuation from receipts).
"""

from decimal import Decimal

from rest_framework import serializers

from products.models import Category, Product


class ProductSerializer(serializers.ModelSerializer):
    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)

    is_low_stock = serializers.BooleanField(read_only=True)
    is_in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "category",
            "category_name",
            "sku",
            "name",
            "description",
            "price",
            "cost_price",
            "stock_qty",
            "min_stock",
            "is_low_stock",
            "is_in_stock",
            "is_active",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "cost_price",
            "stock_qty",
            "created_by",
            "created_at",
            "updated_at",
        ]

    def validate_sku(self, value):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("sku cannot be blank")
        return v

    def validate_price(self, value):
        if value is None or value < Decimal("0.00"):
            raise serializers.ValidationError("price cannot be negative")
        return value

    def update(self, instance, validated_data):
        # stock_qty / cost_price belong to the stock mutator: never rewrite them here
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save(update_fields=[*validated_data.keys(), "updated_at"])
        return instance
