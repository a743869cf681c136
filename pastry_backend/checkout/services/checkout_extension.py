# checkout/services/checkout_extension.py

"""
CHECKOUT INTEGRATION

Observes newly written pending CheckoutSession rows, asks Stripe for a hosted
checkout page out of band and writes the result back into the same row:

    success -> status=open,   url, provider_session_id
    failure -> status=failed, error

The checkout endpoint never talks to Stripe directly; it polls the row.

Dispatch (settings.CHECKOUT["EXTENSION_MODE"]):
- "thread": after commit, on a daemon thread (default)
- "inline": immediately, on the saving connection (tests, single worker)
- "off":    nothing; sessions stay pending until expired
"""

from __future__ import annotations

import logging
import threading

from django.conf import settings
from django.db import connection, transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from checkout.models import CheckoutSession
from checkout.services import stripe_gateway
from checkout.services.exceptions import PaymentConfigurationError, PaymentProviderError

logger = logging.getLogger(__name__)

MODE_THREAD = "thread"
MODE_INLINE = "inline"
MODE_OFF = "off"


def _mode() -> str:
    cfg = getattr(settings, "CHECKOUT", {}) or {}
    mode = str(cfg.get("EXTENSION_MODE") or MODE_THREAD).strip().lower()
    if mode not in (MODE_THREAD, MODE_INLINE, MODE_OFF):
        logger.warning("Unknown checkout extension mode; using thread", extra={"mode": mode})
        return MODE_THREAD
    return mode


def _save(session: CheckoutSession, fields: list[str]):
    session.save(update_fields=[*fields, "updated_at"])


def process_checkout_session(session_id) -> CheckoutSession | None:
    """
    Enrich one pending session. Sessions that are no longer pending are
    skipped, so running this twice for the same row is harmless.
    """
    session = CheckoutSession.objects.filter(id=session_id).first()
    if session is None:
        logger.warning("Checkout session vanished before processing", extra={"session_id": str(session_id)})
        return None

    if session.status != CheckoutSession.STATUS_PENDING:
        logger.info(
            "Checkout session already processed",
            extra={"session_id": str(session.id), "status": session.status},
        )
        return session

    error = ""
    result: dict = {}
    try:
        result = stripe_gateway.create_checkout_session(
            line_items=session.line_items,
            success_url=session.success_url,
            cancel_url=session.cancel_url,
            customer_email=session.customer_email,
            client_reference_id=str(session.id),
            metadata={"checkout_session_id": str(session.id)},
            mode=session.mode,
        )
    except (PaymentConfigurationError, PaymentProviderError) as exc:
        error = str(exc)
    except Exception as exc:
        logger.exception("Unexpected error creating Stripe checkout session", extra={"session_id": str(session.id)})
        error = f"Unexpected error: {exc}"

    with transaction.atomic():
        session = CheckoutSession.objects.select_for_update().get(id=session.id)
        if session.status != CheckoutSession.STATUS_PENDING:
            # Expired by the cleanup command while we were waiting on Stripe
            logger.warning(
                "Checkout session changed while contacting Stripe",
                extra={"session_id": str(session.id), "status": session.status},
            )
            return session

        if error or not result.get("url"):
            session.mark_failed(error or "Stripe returned no checkout URL")
            _save(session, ["status", "error"])
            logger.warning(
                "Checkout session failed",
                extra={"session_id": str(session.id), "error": session.error},
            )
            return session

        session.mark_open(url=result["url"], provider_session_id=result.get("id") or "")
        _save(session, ["status", "url", "provider_session_id", "error"])

    logger.info(
        "Checkout session opened",
        extra={"session_id": str(session.id), "provider_session_id": session.provider_session_id},
    )
    return session


def _run_in_thread(session_id):
    try:
        process_checkout_session(session_id)
    except Exception:
        logger.exception("Checkout integration thread crashed", extra={"session_id": str(session_id)})
    finally:
        # The thread owns its own DB connection
        connection.close()


def dispatch(session_id, mode: str | None = None):
    mode = mode or _mode()

    if mode == MODE_INLINE:
        process_checkout_session(session_id)
    elif mode == MODE_THREAD:
        threading.Thread(
            target=_run_in_thread,
            args=(session_id,),
            name=f"checkout-{session_id}",
            daemon=True,
        ).start()


@receiver(post_save, sender=CheckoutSession, dispatch_uid="checkout_extension_on_session_created")
def on_checkout_session_created(sender, instance, created, raw=False, **kwargs):
    if raw or not created or instance.status != CheckoutSession.STATUS_PENDING:
        return

    mode = _mode()
    if mode == MODE_OFF:
        logger.info("Checkout extension is off; session left pending", extra={"session_id": str(instance.id)})
        return

    session_id = instance.id
    if mode == MODE_INLINE:
        # Same connection: the uncommitted row is visible
        dispatch(session_id, mode)
        return

    # A worker thread uses its own connection and must see the committed row
    transaction.on_commit(lambda: dispatch(session_id, mode))
