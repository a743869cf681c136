# checkout/models/provider_secret.py

from django.db import models


class ProviderSecret(models.Model):
    """
    Database fallback for payment provider credentials.

    Settings win; this row is only read when the environment does not carry
    the key (e.g. a demo deployment configured from the admin).
    """

    NAME_STRIPE_SECRET_KEY = "stripe_secret_key"

    NAME_CHOICES = [
        (NAME_STRIPE_SECRET_KEY, "Stripe secret key"),
    ]

    name = models.CharField(max_length=64, unique=True, choices=NAME_CHOICES)
    value = models.TextField()

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        # never render the value
        return self.name
