"""
MIGRATION: CREATE CheckoutSession + ProviderSecret
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ProviderSecret",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "name",
                    models.CharField(
                        choices=[("stripe_secret_key", "Stripe secret key")],
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("value", models.TextField()),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="CheckoutSession",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("customer_email", models.EmailField(blank=True, db_index=True, default="", max_length=254)),
                ("customer", models.JSONField(blank=True, default=dict)),
                ("line_items", models.JSONField(blank=True, default=list)),
                ("basket", models.JSONField(blank=True, default=list)),
                (
                    "amount_total",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12),
                ),
                ("currency", models.CharField(default="eur", max_length=8)),
                ("mode", models.CharField(default="payment", max_length=16)),
                ("success_url", models.CharField(blank=True, default="", max_length=1000)),
                ("cancel_url", models.CharField(blank=True, default="", max_length=1000)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("open", "Open"),
                            ("complete", "Complete"),
                            ("expired", "Expired"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("url", models.CharField(blank=True, default="", max_length=1000)),
                (
                    "provider_session_id",
                    models.CharField(blank=True, db_index=True, default="", max_length=255),
                ),
                ("error", models.TextField(blank=True, default="")),
                (
                    "client_reference",
                    models.CharField(blank=True, db_index=True, default="", max_length=255),
                ),
                (
                    "created_at",
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="checkout_sessions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="checkout_status_created_idx"),
                ],
            },
        ),
    ]
