# checkout/models/checkout_session.py

"""
PATH: checkout/models/checkout_session.py

CHECKOUT SESSION

A pending request for a hosted payment page.

Lifecycle:
    pending  -> written by the checkout endpoint
    open     -> the integration got a redirect URL from the provider
    failed   -> the integration wrote an error back
    complete -> provider webhook confirmed payment
    expired  -> provider expired it, or the cleanup command gave up on it

Terminal states (complete / expired / failed) are never re-opened. The only
exit from a terminal state is expired -> complete, when the provider reports a
payment for a session the cleanup command already gave up on.
Transition methods only set fields; callers save with update_fields.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from checkout.services.exceptions import InvalidSessionTransition


class CheckoutSession(models.Model):
    STATUS_PENDING = "pending"
    STATUS_OPEN = "open"
    STATUS_COMPLETE = "complete"
    STATUS_EXPIRED = "expired"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_OPEN, "Open"),
        (STATUS_COMPLETE, "Complete"),
        (STATUS_EXPIRED, "Expired"),
        (STATUS_FAILED, "Failed"),
    ]

    TERMINAL_STATUSES = (STATUS_COMPLETE, STATUS_EXPIRED, STATUS_FAILED)

    MODE_PAYMENT = "payment"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="checkout_sessions",
    )

    customer_email = models.EmailField(blank=True, default="", db_index=True)

    # Client-held contact blob, stored as received (after validation)
    customer = models.JSONField(default=dict, blank=True)

    # Provider line items: [{"price_data": {...}, "quantity": n}]
    line_items = models.JSONField(default=list, blank=True)

    # Repriced basket snapshot, used to build the order on completion:
    # [{"product_id": "...", "name": "...", "price": "3.50", "quantity": 2, "line_total": "7.00"}]
    basket = models.JSONField(default=list, blank=True)

    amount_total = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    currency = models.CharField(max_length=8, default="eur")
    mode = models.CharField(max_length=16, default=MODE_PAYMENT)

    success_url = models.CharField(max_length=1000, blank=True, default="")
    cancel_url = models.CharField(max_length=1000, blank=True, default="")

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True,
    )

    # Written back by the integration
    url = models.CharField(max_length=1000, blank=True, default="")
    provider_session_id = models.CharField(max_length=255, blank=True, default="", db_index=True)
    error = models.TextField(blank=True, default="")

    client_reference = models.CharField(max_length=255, blank=True, default="", db_index=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="checkout_status_created_idx"),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    def _ensure_not_terminal(self, target: str):
        if self.is_terminal:
            raise InvalidSessionTransition(
                f"Checkout session cannot move from '{self.status}' to '{target}'"
            )

    def mark_open(self, *, url: str, provider_session_id: str = ""):
        self._ensure_not_terminal(self.STATUS_OPEN)
        if not (url or "").strip():
            raise InvalidSessionTransition("An open checkout session needs a redirect URL")

        self.status = self.STATUS_OPEN
        self.url = url.strip()
        self.provider_session_id = (provider_session_id or "").strip()
        self.error = ""

    def mark_failed(self, error: str):
        self._ensure_not_terminal(self.STATUS_FAILED)
        self.status = self.STATUS_FAILED
        self.error = (error or "").strip() or "Payment provider error"

    def mark_complete(self, *, completed_at=None):
        # A provider completion wins over a local expiry: the customer paid.
        if self.status in (self.STATUS_COMPLETE, self.STATUS_FAILED):
            raise InvalidSessionTransition(
                f"Checkout session cannot move from '{self.status}' to '{self.STATUS_COMPLETE}'"
            )
        self.status = self.STATUS_COMPLETE
        self.completed_at = completed_at or timezone.now()

    def mark_expired(self):
        self._ensure_not_terminal(self.STATUS_EXPIRED)
        self.status = self.STATUS_EXPIRED

    def __str__(self):
        return f"{self.id} ({self.status})"
