# PATH: orders/models/order.py

"""
PATH: orders/models/order.py

ORDER

A customer order, either placed directly (POST /api/orders/) or created when
a Stripe checkout session completes (paid).

Items are a server-side snapshot, priced from the catalog at order time:
    [{"product_id": "...", "name": "...", "price": "3.50", "quantity": 2, "line_total": "7.00"}]

Status lifecycle (admin driven):
    pending -> processing -> completed
    pending / processing -> cancelled
Completed orders cannot be cancelled; nothing goes back to pending.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from orders.services.exceptions import InvalidOrderTransition


class Order(models.Model):
    STATUS_PENDING = "pending"
    STATUS_PROCESSING = "processing"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_no = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated public order number",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    customer_name = models.CharField(max_length=255)
    customer_email = models.EmailField(db_index=True)
    customer_phone = models.CharField(max_length=64, blank=True, default="")
    customer_address = models.TextField(blank=True, default="")
    notes = models.TextField(blank=True, default="")

    items = models.JSONField(default=list, blank=True)

    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=8, default="eur")

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True,
    )
    is_paid = models.BooleanField(default=False)

    checkout_session = models.OneToOneField(
        "checkout.CheckoutSession",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order",
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self.order_no:
            prefix = timezone.now().strftime("ORD%Y%m%d")
            self.order_no = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"
        super().save(*args, **kwargs)

    @property
    def items_count(self) -> int:
        return sum(int(line.get("quantity") or 0) for line in (self.items or []))

    def mark_processing(self):
        if self.status != self.STATUS_PENDING:
            raise InvalidOrderTransition(
                f"Order cannot move to processing from status '{self.status}'"
            )
        self.status = self.STATUS_PROCESSING

    def mark_completed(self, *, completed_at=None):
        if self.status not in (self.STATUS_PENDING, self.STATUS_PROCESSING):
            raise InvalidOrderTransition(
                f"Order cannot be completed from status '{self.status}'"
            )
        self.status = self.STATUS_COMPLETED
        self.completed_at = completed_at or timezone.now()

    def cancel(self):
        if self.status == self.STATUS_COMPLETED:
            raise InvalidOrderTransition("Completed orders cannot be cancelled.")
        if self.status == self.STATUS_CANCELLED:
            raise InvalidOrderTransition("Order is already cancelled.")
        self.status = self.STATUS_CANCELLED

    def apply_status(self, status: str) -> bool:
        """
        Move to `status` through the controlled transitions.
        Returns False when the order already has that status.
        """
        status = (status or "").strip().lower()
        if status == self.status:
            return False

        transitions = {
            self.STATUS_PROCESSING: self.mark_processing,
            self.STATUS_COMPLETED: self.mark_completed,
            self.STATUS_CANCELLED: self.cancel,
        }
        if status == self.STATUS_PENDING:
            raise InvalidOrderTransition("Orders cannot be moved back to pending.")
        if status not in transitions:
            raise InvalidOrderTransition(f"Invalid status '{status}'")

        transitions[status]()
        return True

    def __str__(self):
        return f"{self.order_no} ({self.status})"
