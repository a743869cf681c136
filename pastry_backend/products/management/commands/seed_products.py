from decimal import Decimal

from django.core.management.base import BaseCommand

from products.models import Product

PASTRIES = [
    # name, category, price, tags, ingredients, description
    (
        "Cannolo Siciliano",
        "Pasticceria",
        "3.50",
        ["classic", "ricotta"],
        "Ricotta, sugar, candied orange, pistachio, wafer shell",
        "Crisp shell filled to order with sweet sheep's milk ricotta.",
    ),
    (
        "Sfogliatella Riccia",
        "Pasticceria",
        "2.80",
        ["classic", "neapolitan"],
        "Semolina, ricotta, candied citrus, puff pastry",
        "Shell-shaped layers of crisp pastry around a citrus ricotta filling.",
    ),
    (
        "Babà al Rum",
        "Pasticceria",
        "3.00",
        ["neapolitan"],
        "Flour, eggs, butter, rum syrup",
        "Soft leavened cake soaked in rum syrup.",
    ),
    (
        "Cornetto alla Crema",
        "Colazione",
        "1.50",
        ["breakfast"],
        "Flour, butter, eggs, pastry cream",
        "Butter croissant filled with vanilla pastry cream.",
    ),
    (
        "Cornetto Integrale al Miele",
        "Colazione",
        "1.70",
        ["breakfast", "wholegrain"],
        "Wholegrain flour, butter, honey",
        "",
    ),
    (
        "Torta Caprese",
        "Torte",
        "28.00",
        ["gluten-free", "chocolate"],
        "Almonds, dark chocolate, butter, eggs, sugar",
        "Flourless almond and chocolate cake, serves 8.",
    ),
    (
        "Pastiera Napoletana",
        "Torte",
        "30.00",
        ["seasonal", "neapolitan"],
        "Wheat berries, ricotta, eggs, orange blossom water",
        "Easter tart with cooked wheat and ricotta, serves 8.",
    ),
    (
        "Zeppola di San Giuseppe",
        "Pasticceria",
        None,
        ["seasonal"],
        "Choux pastry, pastry cream, amarena cherry",
        "Available in March; priced in store.",
    ),
    (
        "Biscotti alla Mandorla (250g)",
        "",
        "7.50",
        ["gift"],
        "Almonds, sugar, egg whites",
        "Soft almond biscuits.",
    ),
]


class Command(BaseCommand):
    help = "Seed the demo pastry catalog (idempotent, matched by name)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--update",
            action="store_true",
            help="Overwrite existing products with the demo data",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding pastry catalog..."))

        created_count = 0
        updated_count = 0

        for name, category, price, tags, ingredients, description in PASTRIES:
            defaults = {
                "category": category,
                "price": Decimal(price) if price is not None else None,
                "tags": tags,
                "ingredients": ingredients,
                "description": description,
                "is_active": True,
            }

            if options["update"]:
                _, created = Product.objects.update_or_create(name=name, defaults=defaults)
                if not created:
                    updated_count += 1
            else:
                _, created = Product.objects.get_or_create(name=name, defaults=defaults)

            if created:
                created_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Catalog seeded: {created_count} created, {updated_count} updated, "
                f"{Product.objects.count()} total."
            )
        )
