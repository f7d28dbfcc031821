# products/references.py

"""
STOCK MOVEMENT REFERENCES

Every ledger row points at the document that caused it. The set of
documents is closed: a sale, a purchase order, a stock adjustment, or
nothing. It is modelled as a tagged union of frozen dataclasses and stored
as (reference_type, reference_id) columns on StockMovement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from django.db import models


class ReferenceType(models.TextChoices):
    NONE = "none", "None"
    SALE = "sale", "Sale"
    PURCHASE_ORDER = "purchase_order", "Purchase Order"
    STOCK_ADJUSTMENT = "stock_adjustment", "Stock Adjustment"


@dataclass(frozen=True)
class SaleRef:
    sale_id: int
    kind: ClassVar[str] = ReferenceType.SALE

    @property
    def id(self) -> int:
        return self.sale_id


@dataclass(frozen=True)
class PurchaseOrderRef:
    purchase_order_id: int
    kind: ClassVar[str] = ReferenceType.PURCHASE_ORDER

    @property
    def id(self) -> int:
        return self.purchase_order_id


@dataclass(frozen=True)
class StockAdjustmentRef:
    stock_adjustment_id: int
    kind: ClassVar[str] = ReferenceType.STOCK_ADJUSTMENT

    @property
    def id(self) -> int:
        return self.stock_adjustment_id


@dataclass(frozen=True)
class NoRef:
    kind: ClassVar[str] = ReferenceType.NONE

    @property
    def id(self) -> None:
        return None


MovementReference = Union[SaleRef, PurchaseOrderRef, StockAdjustmentRef, NoRef]

_REF_CLASSES = {
    ReferenceType.SALE: SaleRef,
    ReferenceType.PURCHASE_ORDER: PurchaseOrderRef,
    ReferenceType.STOCK_ADJUSTMENT: StockAdjustmentRef,
}

# model label -> reference type
_MODEL_REFERENCE_TYPES = {
    "sales.sale": ReferenceType.SALE,
    "purchases.purchaseorder": ReferenceType.PURCHASE_ORDER,
    "products.stockadjustment": ReferenceType.STOCK_ADJUSTMENT,
}


def reference_for(obj) -> MovementReference:
    """
    Build the reference for a saved Sale / PurchaseOrder / StockAdjustment.
    None maps to NoRef; a ref passes through unchanged.
    """
    if obj is None:
        return NoRef()

    if isinstance(obj, (SaleRef, PurchaseOrderRef, StockAdjustmentRef, NoRef)):
        return obj

    meta = getattr(obj, "_meta", None)
    ref_type = _MODEL_REFERENCE_TYPES.get(getattr(meta, "label_lower", ""))
    if ref_type is None:
        raise TypeError(f"{type(obj).__name__} cannot be a stock movement reference")

    if obj.pk is None:
        raise ValueError("reference document must be saved before it is referenced")

    return _REF_CLASSES[ref_type](obj.pk)


def to_columns(ref: MovementReference) -> tuple[str, Optional[int]]:
    if isinstance(ref, NoRef):
        return ReferenceType.NONE, None
    if isinstance(ref, (SaleRef, PurchaseOrderRef, StockAdjustmentRef)):
        return ref.kind, ref.id
    raise TypeError(f"Unknown movement reference: {ref!r}")


def from_columns(reference_type: str, reference_id: Optional[int]) -> MovementReference:
    if reference_type in (None, "", ReferenceType.NONE):
        return NoRef()

    try:
        ref_cls = _REF_CLASSES[ReferenceType(reference_type)]
    except ValueError as exc:
        raise ValueError(f"Unknown reference_type: {reference_type!r}") from exc

    if reference_id is None:
        raise ValueError(f"{reference_type} reference requires reference_id")

    return ref_cls(int(reference_id))
