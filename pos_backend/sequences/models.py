# sequences/models.py

"""
DOCUMENT SEQUENCES

One counter row per (prefix, day). Human-readable document numbers
(TRX-YYYYMMDD-0001, PO-YYYYMMDD-0001) are issued from here, never from
"count of today's rows + 1".

GUARANTEES:
- Counter increments happen under a row lock inside the caller's transaction
- (prefix, day) is unique, so two writers can never own separate counters
"""

from django.db import models


class DocumentSequence(models.Model):
    prefix = models.CharField(max_length=16)
    day = models.DateField()
    last_value = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-day", "prefix"]
        constraints = [
            models.UniqueConstraint(
                fields=["prefix", "day"],
                name="uniq_document_sequence_prefix_day",
            ),
        ]

    def __str__(self):
        return f"{self.prefix} {self.day:%Y-%m-%d} #{self.last_value}"
