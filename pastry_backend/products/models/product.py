# products/models/product.py

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import models

UNCATEGORIZED_LABEL = "Uncategorized"


class Product(models.Model):
    """
    A pastry on sale in the storefront.

    PRICING:
    - price is optional: a product can be shown in the catalog before it is
      priced. Baskets and orders treat a missing price as 0.
    - price is never negative.

    STRIPE:
    - stripe_product_id / stripe_price_id are filled in by
      `manage.py sync_products_to_stripe` and are informational only;
      checkout always sends inline price_data built from `price`.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    # Free-text category, grouped on the fly for the categories page
    category = models.CharField(max_length=120, blank=True, default="", db_index=True)

    tags = models.JSONField(default=list, blank=True)
    ingredients = models.TextField(blank=True, default="")
    image_url = models.URLField(max_length=500, blank=True, default="")

    is_active = models.BooleanField(default=True)

    stripe_product_id = models.CharField(max_length=64, blank=True, default="")
    stripe_price_id = models.CharField(max_length=64, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_active", "category"], name="product_active_category_idx"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError("Product name is required")

        if self.price is not None and Decimal(self.price) < Decimal("0.00"):
            raise ValidationError("Price cannot be negative")

        if not isinstance(self.tags, list) or not all(isinstance(t, str) for t in self.tags):
            raise ValidationError("tags must be a list of strings")

    @property
    def category_label(self) -> str:
        return (self.category or "").strip() or UNCATEGORIZED_LABEL

    @property
    def effective_price(self) -> Decimal:
        if self.price is None:
            return Decimal("0.00")
        return Decimal(self.price).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @property
    def unit_amount_cents(self) -> int:
        """Price in the smallest currency unit (what Stripe expects)."""
        cents = (self.effective_price * Decimal("100")).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
        return int(cents)

    @property
    def is_synced_to_stripe(self) -> bool:
        return bool(self.stripe_product_id and self.stripe_price_id)
