from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=255, unique=True)),
                ("description", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
                "verbose_name_plural": "categories",
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("sku", models.CharField(max_length=128, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "cost_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Last purchase unit cost (last-cost valuation).",
                        max_digits=12,
                        null=True,
                    ),
                ),
                ("stock_qty", models.IntegerField(default=0, editable=False)),
                ("min_stock", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="products",
                        to="products.category",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="product_name_idx"),
                    models.Index(fields=["is_active"], name="product_is_active_idx"),
                    models.Index(fields=["stock_qty"], name="product_stock_qty_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(stock_qty__gte=0),
                        name="product_stock_qty_nonnegative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(price__gte=Decimal("0.00")),
                        name="product_price_nonnegative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockAdjustment",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("damaged", "Damaged"),
                            ("lost", "Lost"),
                            ("correction", "Correction"),
                            ("other", "Other"),
                        ],
                        max_length=16,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_adjustments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "movement_type",
                    models.CharField(
                        choices=[
                            ("purchase", "Purchase"),
                            ("sale", "Sale"),
                            ("adjustment", "Adjustment"),
                            ("sale_cancel", "Sale Cancellation"),
                        ],
                        max_length=16,
                    ),
                ),
                (
                    "reference_type",
                    models.CharField(
                        choices=[
                            ("none", "None"),
                            ("sale", "Sale"),
                            ("purchase_order", "Purchase Order"),
                            ("stock_adjustment", "Stock Adjustment"),
                        ],
                        default="none",
                        max_length=32,
                    ),
                ),
                ("reference_id", models.BigIntegerField(blank=True, null=True)),
                ("quantity", models.IntegerField(help_text="Signed change: + in, - out.")),
                ("stock_before", models.IntegerField()),
                ("stock_after", models.IntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "performed_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["product", "created_at"],
                        name="stockmove_product_created_idx",
                    ),
                    models.Index(
                        fields=["reference_type", "reference_id"],
                        name="stockmove_reference_idx",
                    ),
                    models.Index(
                        fields=["movement_type"],
                        name="stockmove_type_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            stock_after=models.F("stock_before") + models.F("quantity")
                        ),
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
                        condition=models.Q(("quantity", 0), _negated=True),
                        name="stock_movement_quantity_nonzero",
                    ),
                ],
            },
        ),
    ]
