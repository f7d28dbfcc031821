from datetime import date

from django.test import TestCase
from django.utils.connection import ConnectionDoesNotExist

from sequences.models import DocumentSequence
from sequences.services import format_document_number, next_document_number


class DocumentSequenceTests(TestCase):
    """
    GUARANTEES:
    - Numbers are sequential per (prefix, day)
    - Days and prefixes never share a counter
    """

    def test_first_number_of_the_day(self):
        number = next_document_number("TRX", day=date(2025, 1, 15))
        self.assertEqual(number, "TRX-20250115-0001")

    def test_numbers_increment(self):
        day = date(2025, 1, 15)
        numbers = [next_document_number("TRX", day=day) for _ in range(3)]

        self.assertEqual(
            numbers,
            ["TRX-20250115-0001", "TRX-20250115-0002", "TRX-20250115-0003"],
        )
        self.assertEqual(DocumentSequence.objects.get(prefix="TRX", day=day).last_value, 3)

    def test_counter_resets_per_day(self):
        next_document_number("TRX", day=date(2025, 1, 15))
        number = next_document_number("TRX", day=date(2025, 1, 16))

        self.assertEqual(number, "TRX-20250116-0001")

    def test_prefixes_are_independent(self):
        day = date(2025, 1, 15)
        next_document_number("TRX", day=day)
        next_document_number("TRX", day=day)

        self.assertEqual(next_document_number("po", day=day), "PO-20250115-0001")

    def test_counter_runs_on_requested_database(self):
        day = date(2025, 1, 15)

        self.assertEqual(next_document_number("TRX", day=day, using="default"), "TRX-20250115-0001")

        with self.assertRaises(ConnectionDoesNotExist):
            next_document_number("TRX", day=day, using="missing")

    def test_blank_prefix_rejected(self):
        with self.assertRaises(ValueError):
            next_document_number("  ")

    def test_format_pads_to_four_digits(self):
        self.assertEqual(
            format_document_number("PO", date(2024, 12, 25), 42),
            "PO-20241225-0042",
        )
