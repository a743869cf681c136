# checkout/services/checkout_orchestrator.py

"""
CHECKOUT ORCHESTRATION

Flow behind POST /api/checkout/:

    1) checkout_guard.hold(key)       one in-flight checkout per key
    2) start_checkout(...)            reprice basket, write pending session
    3) (integration enriches the row with url / error)
    4) wait_for_redirect_url(id)      poll the row, give up after the timeout

The guard is per process and best effort: other workers, retries and replays
can still create duplicate sessions. Sessions abandoned on timeout stay
pending until expire_stale_sessions() picks them up.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from checkout.models import CheckoutSession
from checkout.services import stripe_gateway
from checkout.services.basket import Basket, reprice
from checkout.services.exceptions import (
    BasketValidationError,
    CheckoutFailedError,
    CheckoutInProgressError,
    CheckoutTimeoutError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_POLL_INTERVAL_SECONDS = 0.5
DEFAULT_STALE_AFTER_MINUTES = 60


def _checkout_cfg() -> dict:
    cfg = getattr(settings, "CHECKOUT", {}) or {}
    return cfg if isinstance(cfg, dict) else {}


# ---------------- GUARD ----------------
class CheckoutGuard:
    """
    Process-wide set of in-flight checkout keys.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()

    @staticmethod
    def normalize(key) -> str:
        return str(key or "").strip().lower()

    def is_held(self, key) -> bool:
        with self._lock:
            return self.normalize(key) in self._in_flight

    @contextmanager
    def hold(self, key):
        key = self.normalize(key)
        with self._lock:
            if key in self._in_flight:
                raise CheckoutInProgressError("Checkout already in progress")
            self._in_flight.add(key)

        try:
            yield key
        finally:
            with self._lock:
                self._in_flight.discard(key)


checkout_guard = CheckoutGuard()


# ---------------- SESSION CREATION ----------------
def build_line_items(basket: Basket, currency: str) -> list[dict]:
    """Stripe inline price_data line items (amounts in cents)."""
    line_items = []
    for line in basket.snapshot():
        cents = int((Decimal(line["price"]) * 100).to_integral_value())
        line_items.append(
            {
                "price_data": {
                    "currency": currency,
                    "product_data": {"name": line["name"] or "Product"},
                    "unit_amount": cents,
                },
                "quantity": line["quantity"],
            }
        )
    return line_items


def start_checkout(
    *,
    items,
    customer: dict,
    success_url: str,
    cancel_url: str,
    user=None,
    client_reference: str = "",
) -> CheckoutSession:
    """
    Reprice the basket and write a pending checkout session.
    The integration picks the row up from its post_save observer.
    """
    basket = reprice(items)
    total = basket.total()
    if total <= Decimal("0.00"):
        raise BasketValidationError("Basket total must be greater than 0")

    currency = stripe_gateway.get_currency()
    customer = dict(customer or {})

    with transaction.atomic():
        session = CheckoutSession.objects.create(
            user=user if getattr(user, "is_authenticated", False) else None,
            customer_email=(customer.get("email") or "").strip(),
            customer=customer,
            line_items=build_line_items(basket, currency),
            basket=basket.snapshot(),
            amount_total=total,
            currency=currency,
            mode=CheckoutSession.MODE_PAYMENT,
            success_url=success_url,
            cancel_url=cancel_url,
            client_reference=(client_reference or "").strip(),
        )

    logger.info(
        "Checkout session created",
        extra={
            "session_id": str(session.id),
            "amount_total": str(total),
            "items_count": basket.items_count(),
        },
    )
    return session


# ---------------- WAIT ----------------
def wait_for_redirect_url(
    session_id,
    *,
    timeout: float | None = None,
    poll_interval: float | None = None,
    clock=time.monotonic,
    sleep=time.sleep,
) -> str:
    """
    Poll the session until the integration writes a URL or an error.
    """
    cfg = _checkout_cfg()
    if timeout is None:
        timeout = float(cfg.get("TIMEOUT_SECONDS") or DEFAULT_TIMEOUT_SECONDS)
    if poll_interval is None:
        poll_interval = float(cfg.get("POLL_INTERVAL_SECONDS") or DEFAULT_POLL_INTERVAL_SECONDS)

    deadline = clock() + timeout

    while True:
        row = (
            CheckoutSession.objects.filter(id=session_id)
            .values("status", "url", "error")
            .first()
        )
        if row is None:
            raise CheckoutFailedError("Checkout session not found")

        if row["url"]:
            return row["url"]

        if row["status"] == CheckoutSession.STATUS_FAILED or row["error"]:
            raise CheckoutFailedError(row["error"] or "Checkout session failed")

        if row["status"] in (CheckoutSession.STATUS_EXPIRED, CheckoutSession.STATUS_COMPLETE):
            raise CheckoutFailedError(f"Checkout session is {row['status']}")

        remaining = deadline - clock()
        if remaining <= 0:
            logger.warning(
                "Timed out waiting for checkout URL",
                extra={"session_id": str(session_id), "timeout": timeout},
            )
            raise CheckoutTimeoutError("Timed out waiting for the payment page")

        sleep(min(poll_interval, remaining))


# ---------------- CLEANUP ----------------
def expire_stale_sessions(*, older_than: timedelta | None = None, now=None) -> int:
    """
    Expire pending/open sessions older than the cutoff. Returns how many.
    """
    if older_than is None:
        minutes = int(_checkout_cfg().get("STALE_AFTER_MINUTES") or DEFAULT_STALE_AFTER_MINUTES)
        older_than = timedelta(minutes=minutes)

    cutoff = (now or timezone.now()) - older_than

    stale_ids = list(
        CheckoutSession.objects.filter(
            status__in=(CheckoutSession.STATUS_PENDING, CheckoutSession.STATUS_OPEN),
            created_at__lt=cutoff,
        ).values_list("id", flat=True)
    )

    expired = 0
    for session_id in stale_ids:
        with transaction.atomic():
            session = CheckoutSession.objects.select_for_update().get(id=session_id)
            if session.is_terminal:
                continue
            session.mark_expired()
            session.save(update_fields=["status", "updated_at"])
            expired += 1

    if expired:
        logger.info("Expired stale checkout sessions", extra={"count": expired, "cutoff": cutoff.isoformat()})
    return expired
