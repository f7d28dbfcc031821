# sales/admin.py

from django.contrib import admin

from sales.models import Sale, SaleItem


# ======================================================
# SALE ADMIN (VIEW-ONLY)
# ======================================================
# Sales are created by checkout and cancelled through the API so that
# stock and the ledger move with them. The admin never edits them.


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    fields = ("product", "product_sku", "product_name", "quantity", "price", "cost_price", "subtotal")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "sale_number",
        "status",
        "payment_status",
        "payment_method",
        "total_amount",
        "created_by",
        "created_at",
    )
    search_fields = ("sale_number",)
    list_filter = ("status", "payment_status", "payment_method", "created_at")
    inlines = [SaleItemInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
