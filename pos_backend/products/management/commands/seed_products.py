from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from products.models import Category, Product, StockAdjustment
from products.services.stock_adjustments import AdjustmentLine, create_stock_adjustment

User = get_user_model()


class Command(BaseCommand):
    help = "Seed categories, products, and opening stock (via a ledger-backed adjustment)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--actor",
            default="system",
            help="Username recorded as the actor of the opening stock adjustment.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products and stock..."))

        actor, _ = User.objects.get_or_create(
            username=options["actor"],
            defaults={"is_staff": True},
        )

        # -------------------------------
        # CATEGORIES
        # -------------------------------
        categories = ["Beverages", "Snacks", "Household", "Personal Care"]

        category_objs = {}
        for name in categories:
            obj, _ = Category.objects.get_or_create(name=name)
            category_objs[name] = obj

        # -------------------------------
        # PRODUCTS (sku, name, category, price, cost, min_stock, opening qty)
        # -------------------------------
        products_data = [
            ("BEV-COLA-330", "Cola 330ml", "Beverages", "8000", "6000", 24, 120),
            ("BEV-TEA-500", "Iced Tea 500ml", "Beverages", "6500", "4800", 24, 96),
            ("SNK-CHIPS-68", "Potato Chips 68g", "Snacks", "11000", "8500", 12, 60),
            ("HH-SOAP-1L", "Dish Soap 1L", "Household", "18500", "14000", 6, 30),
            ("PC-SHAMPOO-170", "Shampoo 170ml", "Personal Care", "24000", "19000", 6, 20),
        ]

        opening = []
        for sku, name, cat, price, cost, min_stock, qty in products_data:
            product, created = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "category": category_objs[cat],
                    "price": Decimal(price),
                    "cost_price": Decimal(cost),
                    "min_stock": min_stock,
                    "created_by": actor,
                },
            )
            if created:
                opening.append(AdjustmentLine(product.pk, qty))

        # -------------------------------
        # OPENING STOCK (ledger-backed)
        # -------------------------------
        if opening:
            create_stock_adjustment(
                reason=StockAdjustment.Reason.CORRECTION,
                notes="Opening stock (seed)",
                items=opening,
                actor_id=actor.pk,
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"Products seeded. Opening stock recorded for {len(opening)} products."
            )
        )
