# purchases/api/views.py

import logging

from django.db.models import ProtectedError
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.api.errors import DOMAIN_ERRORS, domain_error_response
from purchases.api.serializers import (
    PurchaseOrderCreateSerializer,
    PurchaseOrderSerializer,
    SupplierSerializer,
)
from purchases.models import PurchaseOrder, Supplier
from purchases.services.exceptions import PurchaseOrderNotFoundError, SupplierNotFoundError
from purchases.services.purchase_order_service import (
    cancel_purchase_order,
    create_purchase_order,
    mark_purchase_order_ordered,
)
from purchases.services.receiving_service import receive_purchase_order

logger = logging.getLogger("purchases")


def _purchase_orders():
    return (
        PurchaseOrder.objects.select_related("supplier")
        .prefetch_related("items", "items__product")
        .order_by("-created_at", "-id")
    )


class SupplierListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SupplierSerializer

    @extend_schema(tags=["purchases"], responses=SupplierSerializer(many=True))
    def get(self, request):
        qs = Supplier.objects.all().order_by("name")

        if request.query_params.get("include_inactive") not in ("1", "true"):
            qs = qs.filter(is_active=True)

        search = (request.query_params.get("q") or "").strip()
        if search:
            qs = qs.filter(name__icontains=search)

        return Response(
            SupplierSerializer(qs, many=True).data, status=status.HTTP_200_OK
        )

    @extend_schema(
        tags=["purchases"],
        request=SupplierSerializer,
        responses={201: SupplierSerializer},
    )
    def post(self, request):
        s = SupplierSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        supplier = s.save()
        return Response(
            SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED
        )


class SupplierDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SupplierSerializer

    def _get_supplier(self, supplier_id):
        try:
            return Supplier.objects.get(pk=supplier_id)
        except Supplier.DoesNotExist as exc:
            raise SupplierNotFoundError(supplier_id) from exc

    @extend_schema(tags=["purchases"], responses=SupplierSerializer)
    def get(self, request, supplier_id):
        try:
            supplier = self._get_supplier(supplier_id)
        except SupplierNotFoundError as exc:
            return domain_error_response(exc)

        return Response(SupplierSerializer(supplier).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=SupplierSerializer,
        responses={200: SupplierSerializer},
    )
    def patch(self, request, supplier_id):
        try:
            supplier = self._get_supplier(supplier_id)
        except SupplierNotFoundError as exc:
            return domain_error_response(exc)

        s = SupplierSerializer(supplier, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        supplier = s.save()
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=None,
        responses={
            204: None,
            404: OpenApiResponse(description="Supplier not found"),
            409: OpenApiResponse(description="Supplier has purchase orders"),
        },
    )
    def delete(self, request, supplier_id):
        try:
            supplier = self._get_supplier(supplier_id)
        except SupplierNotFoundError as exc:
            return domain_error_response(exc)

        try:
            supplier.delete()
        except ProtectedError:
            logger.warning(
                "Supplier deletion rejected",
                extra={"supplier_id": supplier.pk, "actor_id": request.user.pk},
            )
            return Response(
                {
                    "detail": "Supplier has purchase orders and cannot be deleted. "
                    "Deactivate it instead."
                },
                status=status.HTTP_409_CONFLICT,
            )

        return Response(status=status.HTTP_204_NO_CONTENT)


class PurchaseOrderListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PurchaseOrderSerializer

    @extend_schema(tags=["purchases"], responses=PurchaseOrderSerializer(many=True))
    def get(self, request):
        qs = _purchase_orders()

        status_filter = request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)

        supplier_id = request.query_params.get("supplier_id")
        if supplier_id:
            qs = qs.filter(supplier_id=supplier_id)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(
                PurchaseOrderSerializer(page, many=True).data
            )

        return Response(
            PurchaseOrderSerializer(qs, many=True).data, status=status.HTTP_200_OK
        )

    @extend_schema(
        tags=["purchases"],
        request=PurchaseOrderCreateSerializer,
        responses={
            201: PurchaseOrderSerializer,
            400: OpenApiResponse(description="Invalid items"),
            404: OpenApiResponse(description="Unknown supplier or product"),
        },
    )
    def post(self, request):
        s = PurchaseOrderCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            po = create_purchase_order(
                supplier_id=data["supplier_id"],
                items=[dict(line) for line in data["items"]],
                actor_id=request.user.pk,
                expected_delivery_date=data.get("expected_delivery_date"),
                notes=data.get("notes", ""),
            )
        except DOMAIN_ERRORS as exc:
            logger.warning(
                "Purchase order rejected",
                extra={"actor_id": request.user.pk, "error": type(exc).__name__},
            )
            return domain_error_response(exc)

        po = _purchase_orders().get(pk=po.pk)
        return Response(
            PurchaseOrderSerializer(po).data, status=status.HTTP_201_CREATED
        )


class PurchaseOrderDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PurchaseOrderSerializer

    @extend_schema(tags=["purchases"], responses=PurchaseOrderSerializer)
    def get(self, request, purchase_order_id):
        try:
            po = _purchase_orders().get(pk=purchase_order_id)
        except PurchaseOrder.DoesNotExist:
            return domain_error_response(PurchaseOrderNotFoundError(purchase_order_id))

        return Response(PurchaseOrderSerializer(po).data, status=status.HTTP_200_OK)


class _PurchaseOrderActionView(GenericAPIView):
    """
    POST-only status change on a single purchase order.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = PurchaseOrderSerializer
    action_name = ""

    def perform_action(self, request, purchase_order_id):
        raise NotImplementedError

    def post(self, request, purchase_order_id):
        try:
            po = self.perform_action(request, purchase_order_id)
        except DOMAIN_ERRORS as exc:
            logger.warning(
                "Purchase order %s rejected",
                self.action_name,
                extra={
                    "purchase_order_id": purchase_order_id,
                    "actor_id": request.user.pk,
                    "error": type(exc).__name__,
                },
            )
            return domain_error_response(exc)

        po = _purchase_orders().get(pk=po.pk)
        return Response(PurchaseOrderSerializer(po).data, status=status.HTTP_200_OK)


class PurchaseOrderMarkOrderedView(_PurchaseOrderActionView):
    action_name = "order"

    @extend_schema(
        tags=["purchases"],
        request=None,
        responses={200: PurchaseOrderSerializer, 409: OpenApiResponse(description="Not pending")},
    )
    def post(self, request, purchase_order_id):
        return super().post(request, purchase_order_id)

    def perform_action(self, request, purchase_order_id):
        return mark_purchase_order_ordered(purchase_order_id=purchase_order_id)


class PurchaseOrderReceiveView(_PurchaseOrderActionView):
    action_name = "receive"

    @extend_schema(
        tags=["purchases"],
        request=None,
        responses={
            200: PurchaseOrderSerializer,
            400: OpenApiResponse(description="Purchase order has no items"),
            404: OpenApiResponse(description="Purchase order not found"),
            409: OpenApiResponse(description="Already received or cancelled"),
        },
        description="Receive a purchase order: add stock and update product cost prices.",
    )
    def post(self, request, purchase_order_id):
        return super().post(request, purchase_order_id)

    def perform_action(self, request, purchase_order_id):
        return receive_purchase_order(
            purchase_order_id=purchase_order_id, actor_id=request.user.pk
        )


class PurchaseOrderCancelView(_PurchaseOrderActionView):
    action_name = "cancel"

    @extend_schema(
        tags=["purchases"],
        request=None,
        responses={200: PurchaseOrderSerializer, 409: OpenApiResponse(description="Not pending")},
    )
    def post(self, request, purchase_order_id):
        return super().post(request, purchase_order_id)

    def perform_action(self, request, purchase_order_id):
        return cancel_purchase_order(purchase_order_id=purchase_order_id)
