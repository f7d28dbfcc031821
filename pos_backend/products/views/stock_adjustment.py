# products/views/stock_adjustment.py

"""
STOCK ADJUSTMENT (OPNAME) API

POST /api/products/adjustments/
{
  "reason": "damaged" | "lost" | "correction" | "other",
  "notes": "...",
  "items": [{"product_id": 1, "quantity_change": -2}, ...]
}

All items are applied atomically by create_stock_adjustment().
"""

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.api.errors import DOMAIN_ERRORS, domain_error_response
from products.models import StockAdjustment
from products.serializers.stock_adjustment import (
    StockAdjustmentCreateSerializer,
    StockAdjustmentSerializer,
)
from products.services.stock_adjustments import create_stock_adjustment

logger = logging.getLogger("inventory")


class StockAdjustmentViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = StockAdjustmentSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return StockAdjustment.objects.select_related("created_by").order_by("-created_at", "-id")

    @extend_schema(
        request=StockAdjustmentCreateSerializer,
        responses={
            201: StockAdjustmentSerializer,
            400: OpenApiResponse(description="Invalid items or reason"),
            404: OpenApiResponse(description="Unknown product"),
            409: OpenApiResponse(description="Adjustment would make stock negative"),
        },
    )
    def create(self, request, *args, **kwargs):
        payload = StockAdjustmentCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        try:
            adjustment = create_stock_adjustment(
                reason=data["reason"],
                notes=data.get("notes", ""),
                items=[dict(item) for item in data["items"]],
                actor_id=request.user.pk,
            )
        except DOMAIN_ERRORS as exc:
            logger.warning(
                "Stock adjustment rejected",
                extra={"actor_id": request.user.pk, "error": type(exc).__name__},
            )
            return domain_error_response(exc)

        return Response(
            StockAdjustmentSerializer(adjustment).data,
            status=status.HTTP_201_CREATED,
        )
