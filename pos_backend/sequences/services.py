# sequences/services.py

from __future__ import annotations

from datetime import date

from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import F
from django.utils import timezone

from sequences.models import DocumentSequence


def format_document_number(prefix: str, day: date, value: int) -> str:
    return f"{prefix}-{day:%Y%m%d}-{value:04d}"


def next_document_number(
    prefix: str,
    *,
    day: date | None = None,
    using: str = DEFAULT_DB_ALIAS,
) -> str:
    """
    Issue the next number for `prefix` on `day` (defaults to today, local time).

    Must be called inside the transaction that inserts the numbered row, on
    the same database (`using`): the counter lock is then held until that
    row commits, so two concurrent checkouts can never receive the same number.
    """
    prefix = (prefix or "").strip().upper()
    if not prefix:
        raise ValueError("prefix is required")

    day = day or timezone.localdate()

    with transaction.atomic(using=using):
        sequences = DocumentSequence.objects.using(using)
        seq, _ = sequences.select_for_update().get_or_create(prefix=prefix, day=day)
        sequences.filter(pk=seq.pk).update(last_value=F("last_value") + 1)
        seq.refresh_from_db(using=using, fields=["last_value"])

    return format_document_number(prefix, day, seq.last_value)
