# products/views/stock_movement.py

"""
STOCK CARD (KARTU STOK) API

GET /api/products/movements/?product=<id>&movement_type=<type>&date_from=YYYY-MM-DD&date_to=YYYY-MM-DD

Read-only. Newest first.
"""

import django_filters
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from products.models import StockMovement
from products.serializers.stock_movement import StockMovementSerializer
from products.services.ledger import movement_history


class StockMovementFilter(django_filters.FilterSet):
    product = django_filters.NumberFilter(field_name="product_id")
    movement_type = django_filters.ChoiceFilter(choices=StockMovement.MovementType.choices)
    reference_type = django_filters.CharFilter(field_name="reference_type")
    reference_id = django_filters.NumberFilter(field_name="reference_id")
    date_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = StockMovement
        fields = ["product", "movement_type", "reference_type", "reference_id"]


class StockMovementViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = StockMovementSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = StockMovementFilter

    def get_queryset(self):
        return movement_history()
