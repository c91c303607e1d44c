from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.baskets.models import Basket, BasketItem
from modules.catalog.models import CatalogItem
from modules.catalog.uri import CATALOG_BASE_URL_PLACEHOLDER


class Command(BaseCommand):
    help = "Seed database with a demo catalog and a ready-to-checkout basket."

    CATALOG = [
        (".NET Bot Black Sweatshirt", Decimal("19.50"), "1.png"),
        (".NET Black & White Mug", Decimal("8.50"), "2.png"),
        ("Prism White T-Shirt", Decimal("12.00"), "3.png"),
        (".NET Foundation Sweatshirt", Decimal("12.00"), "4.png"),
        ("Roslyn Red Sheet", Decimal("8.50"), "5.png"),
        (".NET Blue Sweatshirt", Decimal("12.00"), "6.png"),
        ("Roslyn Red T-Shirt", Decimal("12.00"), "7.png"),
        ("Kudu Purple Sweatshirt", Decimal("8.50"), "8.png"),
        ("Cup<T> White Mug", Decimal("12.00"), "9.png"),
        (".NET Foundation Sheet", Decimal("12.00"), "10.png"),
    ]

    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        with transaction.atomic():
            users_created = self._seed_users()
            items = self._seed_catalog()
            basket = self._seed_basket(items)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"catalog_items={len(items)}, "
                f"basket={basket.id}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="demouser").exists():
            User.objects.create_user("demouser", password="demouser123")
            created += 1
        return created

    def _seed_catalog(self) -> list[CatalogItem]:
        self.stdout.write("Creating catalog items...")
        items: list[CatalogItem] = []
        for name, price, picture in self.CATALOG:
            item, _ = CatalogItem.objects.get_or_create(
                name=name,
                defaults={
                    "description": name,
                    "price": price,
                    "picture_uri": f"{CATALOG_BASE_URL_PLACEHOLDER}/images/products/{picture}",
                },
            )
            items.append(item)
        return items

    def _seed_basket(self, items: list[CatalogItem]) -> Basket:
        self.stdout.write("Creating demo basket...")
        basket, created = Basket.objects.get_or_create(buyer_id="demouser")
        if created:
            for item, quantity in zip(items[:3], (2, 1, 3)):
                BasketItem.objects.create(
                    basket=basket,
                    catalog_item_id=item.id,
                    unit_price=item.price,
                    quantity=quantity,
                )
        return basket
