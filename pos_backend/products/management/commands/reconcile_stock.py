# products/management/commands/reconcile_stock.py

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from products.services.ledger import reconcile_all


class Command(BaseCommand):
    help = "Replay the stock ledger per product and compare with Product.stock_qty."

    def add_arguments(self, parser):
        parser.add_argument(
            "--product",
            dest="product_ids",
            type=int,
            action="append",
            help="Product id to check (repeatable). Default: all products.",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any product does not reconcile.",
        )

    def handle(self, *args, **options):
        results = reconcile_all(product_ids=options.get("product_ids"))
        broken = [r for r in results if not r.ok]

        for r in broken:
            self.stderr.write(
                self.style.ERROR(
                    f"Product {r.product_id}: stock_qty={r.actual_qty}, "
                    f"replayed={r.expected_qty}, movements={r.movement_count}"
                )
            )
            for problem in r.problems:
                self.stderr.write(f"  - {problem}")

        self.stdout.write(
            self.style.SUCCESS(
                f"Checked {len(results)} products, {len(broken)} out of balance."
            )
        )

        if broken and options.get("strict"):
            raise CommandError(f"{len(broken)} product(s) out of balance.")
