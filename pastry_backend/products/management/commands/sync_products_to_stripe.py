import logging

from django.core.management.base import BaseCommand, CommandError

from checkout.services import stripe_gateway
from checkout.services.exceptions import PaymentConfigurationError, PaymentProviderError
from products.models import Product

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Create a Stripe product + price for every catalog product"

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Re-create Stripe objects for products that are already synced",
        )
        parser.add_argument(
            "--include-inactive",
            action="store_true",
            help="Also sync inactive products",
        )

    def handle(self, *args, **options):
        try:
            stripe_gateway.get_secret_key()
        except PaymentConfigurationError as exc:
            raise CommandError(str(exc)) from exc

        qs = Product.objects.all().order_by("name")
        if not options["include_inactive"]:
            qs = qs.filter(is_active=True)

        total = qs.count()
        self.stdout.write(f"Fetched {total} products.")
        if not total:
            self.stdout.write(self.style.WARNING("No products found."))
            return

        currency = stripe_gateway.get_currency()
        synced = skipped = failed = 0

        for product in qs:
            if product.is_synced_to_stripe and not options["force"]:
                skipped += 1
                continue

            if product.price is None:
                self.stdout.write(self.style.WARNING(f"Skipped (no price): {product.name}"))
                skipped += 1
                continue

            try:
                product_id, price_id = stripe_gateway.create_product_with_price(
                    name=product.name,
                    description=product.description,
                    unit_amount=product.unit_amount_cents,
                    currency=currency,
                )
            except PaymentProviderError as exc:
                logger.error(
                    "Error syncing product to Stripe",
                    extra={"product_id": str(product.id), "error": str(exc)},
                )
                self.stdout.write(self.style.ERROR(f"Failed: {product.name} ({exc})"))
                failed += 1
                continue

            product.stripe_product_id = product_id
            product.stripe_price_id = price_id
            product.save(update_fields=["stripe_product_id", "stripe_price_id", "updated_at"])

            self.stdout.write(f"Synced product: {product.name}")
            synced += 1

        self.stdout.write(
            self.style.SUCCESS(f"Done: {synced} synced, {skipped} skipped, {failed} failed.")
        )
