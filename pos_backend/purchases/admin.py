# purchases/admin.py

from django.contrib import admin

from purchases.models import PurchaseOrder, PurchaseOrderItem, Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "is_active", "created_at")
    search_fields = ("name", "phone", "email")
    list_filter = ("is_active",)


# ======================================================
# PURCHASE ORDERS (VIEW-ONLY)
# ======================================================
# Receiving changes stock, so it only happens through the API.


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    can_delete = False
    fields = ("product", "quantity", "unit_cost", "subtotal")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = (
        "purchase_number",
        "supplier",
        "status",
        "expected_delivery_date",
        "received_at",
        "created_at",
    )
    search_fields = ("purchase_number", "supplier__name")
    list_filter = ("status", "created_at")
    inlines = [PurchaseOrderItemInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
