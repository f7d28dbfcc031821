# purchases/api/urls.py

from django.urls import path

from purchases.api.views import (
    PurchaseOrderCancelView,
    PurchaseOrderDetailView,
    PurchaseOrderListCreateView,
    PurchaseOrderMarkOrderedView,
    PurchaseOrderReceiveView,
    SupplierDetailView,
    SupplierListCreateView,
)

urlpatterns = [
    path("suppliers/", SupplierListCreateView.as_view(), name="purchase-suppliers"),
    path(
        "suppliers/<int:supplier_id>/",
        SupplierDetailView.as_view(),
        name="purchase-supplier-detail",
    ),
    path("orders/", PurchaseOrderListCreateView.as_view(), name="purchase-orders"),
    path(
        "orders/<int:purchase_order_id>/",
        PurchaseOrderDetailView.as_view(),
        name="purchase-order-detail",
    ),
    path(
        "orders/<int:purchase_order_id>/order/",
        PurchaseOrderMarkOrderedView.as_view(),
        name="purchase-order-mark-ordered",
    ),
    path(
        "orders/<int:purchase_order_id>/receive/",
        PurchaseOrderReceiveView.as_view(),
        name="purchase-order-receive",
    ),
    path(
        "orders/<int:purchase_order_id>/cancel/",
        PurchaseOrderCancelView.as_view(),
        name="purchase-order-cancel",
    ),
]
