# checkout/apps.py

"""
CHECKOUT APP CONFIG

Storefront checkout:
- client basket repricing
- checkout-session records + the payment integration that enriches them
- provider pass-throughs (checkout session, payment intent)
- Stripe webhook settlement
"""

from django.apps import AppConfig


class CheckoutConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "checkout"
    verbose_name = "Checkout"

    def ready(self):
        # Connect the post_save observer for new pending sessions
        from checkout.services import checkout_extension  # noqa: F401
