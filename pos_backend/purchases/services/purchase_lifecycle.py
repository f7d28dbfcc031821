"""
PURCHASE ORDER LIFECYCLE DOMAIN RULES

Allowed transitions:
    pending -> ordered | received | cancelled
    ordered -> received

received and cancelled are terminal.

No database writes, no stock mutation.
"""

from purchases.models import PurchaseOrder
from purchases.services.exceptions import (
    AlreadyReceivedError,
    CannotReceiveCancelledError,
    InvalidPurchaseOrderTransitionError,
)

TERMINAL_STATES = {
    PurchaseOrder.STATUS_RECEIVED,
    PurchaseOrder.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    PurchaseOrder.STATUS_PENDING: {
        PurchaseOrder.STATUS_ORDERED,
        PurchaseOrder.STATUS_RECEIVED,
        PurchaseOrder.STATUS_CANCELLED,
    },
    PurchaseOrder.STATUS_ORDERED: {
        PurchaseOrder.STATUS_RECEIVED,
    },
}


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, purchase_order: PurchaseOrder, target_status: str):
    if target_status == PurchaseOrder.STATUS_RECEIVED:
        if purchase_order.status == PurchaseOrder.STATUS_RECEIVED:
            raise AlreadyReceivedError(purchase_order.pk, purchase_order.purchase_number)

        if purchase_order.status == PurchaseOrder.STATUS_CANCELLED:
            raise CannotReceiveCancelledError(
                purchase_order.pk, purchase_order.purchase_number
            )

    if not can_transition(from_status=purchase_order.status, to_status=target_status):
        raise InvalidPurchaseOrderTransitionError(
            purchase_order.pk, purchase_order.status, target_status
        )
