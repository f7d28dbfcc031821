# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Catalog CRUD (stock_qty is read-only)
- Low stock alert list
- Per-product ledger reconciliation

Key rules:
- Stock is never written here. It moves only through sales, purchase
  receipts, cancellations and adjustments.
- DELETE is a soft delete (is_active=False); ledger rows keep pointing
  at the product.
"""

from django.db.models import F, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.models import Product
from products.serializers.product import ProductSerializer
from products.services.ledger import reconcile_product


class ReconciliationSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    ok = serializers.BooleanField()
    expected_qty = serializers.IntegerField(allow_null=True)
    actual_qty = serializers.IntegerField()
    movement_count = serializers.IntegerField()
    problems = serializers.ListField(child=serializers.CharField())


class ProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Product.objects.select_related("category").order_by("name")

        params = self.request.query_params

        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(sku__icontains=q))

        category_id = (params.get("category") or "").strip()
        if category_id:
            qs = qs.filter(category_id=category_id)

        include_inactive = (params.get("include_inactive") or "").strip().lower() in (
            "1",
            "true",
            "yes",
        )
        if not include_inactive and self.action == "list":
            qs = qs.filter(is_active=True)

        return qs

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        if product.is_active:
            product.is_active = False
            product.save(update_fields=["is_active", "updated_at"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    # -----------------------------
    # Alerts: Low stock
    # -----------------------------
    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="threshold",
                type=int,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Override min_stock with a fixed threshold.",
            ),
        ],
        responses={200: ProductSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="alerts/low-stock")
    def low_stock_alerts(self, request):
        """
        GET /api/products/products/alerts/low-stock/?threshold=<int>
        """
        qs = self.get_queryset().filter(is_active=True)

        raw_threshold = (request.query_params.get("threshold") or "").strip()
        if raw_threshold:
            try:
                threshold = int(raw_threshold)
                if threshold < 0:
                    raise ValueError
            except ValueError:
                return Response(
                    {"detail": "threshold must be a non-negative integer"}, status=400
                )
            qs = qs.filter(stock_qty__lte=threshold)
        else:
            qs = qs.filter(stock_qty__lte=F("min_stock"))

        data = self.get_serializer(qs, many=True).data
        return Response({"count": len(data), "results": data})

    # -----------------------------
    # Ledger reconciliation
    # -----------------------------
    @extend_schema(
        responses={200: ReconciliationSerializer},
        description="Replay the product's stock movements and compare with stock_qty.",
    )
    @action(detail=True, methods=["get"], url_path="reconcile")
    def reconcile(self, request, pk=None):
        product = self.get_object()
        result = reconcile_product(product)
        payload = ReconciliationSerializer(
            {
                "product_id": result.product_id,
                "ok": result.ok,
                "expected_qty": result.expected_qty,
                "actual_qty": result.actual_qty,
                "movement_count": result.movement_count,
                "problems": result.problems,
            }
        ).data
        return Response(payload, status=status.HTTP_200_OK)
