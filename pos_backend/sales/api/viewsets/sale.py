# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET

Purpose:
- POST   /api/sales/               checkout -> completed sale
- GET    /api/sales/               sales history (filters below)
- GET    /api/sales/<id>/          receipt payload
- POST   /api/sales/<id>/cancel/   cancel + restore stock

Filters:
- status, payment_method, q (sale_number), date_from, date_to

Rules:
- Backend authoritative for prices, totals and stock
- Domain errors are mapped by products.api.errors
======================================================
"""

from __future__ import annotations

import logging

import django_filters
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.api.errors import DOMAIN_ERRORS, domain_error_response
from sales.models import Sale
from sales.serializers.sale import SaleCreateSerializer, SaleSerializer
from sales.services.sale_cancellation import cancel_sale
from sales.services.sale_service import PaymentInfo, create_sale

logger = logging.getLogger("sales")


class SaleFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Sale.STATUS_CHOICES)
    payment_method = django_filters.ChoiceFilter(choices=Sale.PAYMENT_METHOD_CHOICES)
    q = django_filters.CharFilter(field_name="sale_number", lookup_expr="icontains")
    date_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Sale
        fields = ["status", "payment_method"]


class SaleViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = SaleFilter
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        return (
            Sale.objects.all()
            .select_related("created_by")
            .prefetch_related("items")
            .order_by("-created_at", "-id")
        )

    # ======================================================
    # CHECKOUT
    # ======================================================

    @extend_schema(
        request=SaleCreateSerializer,
        responses={
            201: SaleSerializer,
            400: OpenApiResponse(description="Invalid items or payment"),
            404: OpenApiResponse(description="Unknown or inactive product"),
            409: OpenApiResponse(description="Insufficient stock"),
            422: OpenApiResponse(description="Cash given is lower than total"),
        },
    )
    def create(self, request, *args, **kwargs):
        payload = SaleCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        try:
            sale = create_sale(
                items=[dict(line) for line in data["items"]],
                payment=PaymentInfo(
                    method=data["payment_method"],
                    cash_given=data.get("cash_given"),
                    discount_amount=data.get("discount_amount"),
                    tax_amount=data.get("tax_amount"),
                    notes=data.get("notes", ""),
                ),
                actor_id=request.user.pk,
            )
        except DOMAIN_ERRORS as exc:
            logger.warning(
                "Sale rejected",
                extra={"actor_id": request.user.pk, "error": type(exc).__name__},
            )
            return domain_error_response(exc)

        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

    # ======================================================
    # CANCEL
    # POST /api/sales/:id/cancel/
    # ======================================================

    @extend_schema(
        request=None,
        responses={
            200: SaleSerializer,
            404: OpenApiResponse(description="Sale not found"),
            409: OpenApiResponse(description="Sale already cancelled"),
        },
        description="Cancel a completed sale and restore the sold stock.",
    )
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        try:
            sale = cancel_sale(sale_id=pk, actor_id=request.user.pk)
        except DOMAIN_ERRORS as exc:
            logger.warning(
                "Sale cancellation rejected",
                extra={"sale_id": pk, "actor_id": request.user.pk, "error": type(exc).__name__},
            )
            return domain_error_response(exc)

        sale = self.get_queryset().get(pk=sale.pk)
        return Response(SaleSerializer(sale).data, status=status.HTTP_200_OK)
