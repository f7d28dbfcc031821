# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe stock):

- Product.stock_qty is read-only everywhere in the admin.
- Stock only changes via sales, purchase receipts, cancellations and
  stock adjustments (API / services), never by editing a row here.
- StockMovement and StockAdjustment are view-only audit artifacts.
"""

from django.contrib import admin

from products.models import Category, Product, StockAdjustment, StockMovement


# =====================================================
# CATEGORY
# =====================================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active", "created_at")
    search_fields = ("name",)
    ordering = ("name",)


# =====================================================
# PRODUCT
# =====================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name",
        "category",
        "price",
        "cost_price",
        "stock_qty",
        "min_stock",
        "is_active",
        "created_at",
    )
    list_filter = ("is_active", "category", "created_at")
    search_fields = ("sku", "name")
    ordering = ("name",)
    readonly_fields = ("stock_qty", "cost_price", "created_by", "created_at", "updated_at")

    def save_model(self, request, obj, form, change):
        if not change:
            if obj.created_by_id is None:
                obj.created_by = request.user
            obj.save()
            return

        # never write back a stale stock_qty / cost_price
        obj.save(update_fields=[*form.changed_data, "updated_at"])


# =====================================================
# LEDGER (VIEW-ONLY)
# =====================================================

class _ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockMovement)
class StockMovementAdmin(_ReadOnlyAdmin):
    list_display = (
        "created_at",
        "product",
        "movement_type",
        "quantity",
        "stock_before",
        "stock_after",
        "reference_type",
        "reference_id",
        "performed_by",
    )
    list_filter = ("movement_type", "reference_type", "created_at")
    search_fields = ("product__name", "product__sku")
    ordering = ("-created_at", "-id")


@admin.register(StockAdjustment)
class StockAdjustmentAdmin(_ReadOnlyAdmin):
    list_display = ("id", "reason", "created_by", "created_at")
    list_filter = ("reason", "created_at")
    search_fields = ("notes",)
    ordering = ("-created_at",)
