# products/admin.py

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "category",
        "price",
        "is_active",
        "is_synced_to_stripe",
        "updated_at",
    )
    list_filter = ("is_active", "category", "created_at")
    search_fields = ("name", "description", "ingredients")
    ordering = ("name",)
    readonly_fields = ("stripe_product_id", "stripe_price_id", "created_at", "updated_at")

    @admin.display(boolean=True, description="Stripe")
    def is_synced_to_stripe(self, obj):
        return obj.is_synced_to_stripe
