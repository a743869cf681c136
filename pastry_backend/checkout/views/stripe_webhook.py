# checkout/views/stripe_webhook.py

"""
STRIPE WEBHOOK

POST /api/payments/stripe/webhook/

- Signature verified against STRIPE_WEBHOOK_SECRET (400 when invalid).
- checkout.session.completed -> session complete + one paid Order
- checkout.session.expired   -> session expired
- Everything after a valid signature answers 200 so Stripe stops retrying;
  failures are logged.
"""

from __future__ import annotations

import logging
import uuid

from django.db import transaction
from django.db.models import Q
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from checkout.models import CheckoutSession
from checkout.services.exceptions import InvalidWebhookError, PaymentConfigurationError
from checkout.services.stripe_gateway import construct_webhook_event
from backend.api import WebhookThrottle
from orders.services.orders import create_order_for_checkout_session

logger = logging.getLogger(__name__)

PAID_STATUSES = ("paid", "no_payment_required")


def _find_session(obj: dict):
    provider_id = str(obj.get("id") or "").strip()
    local_id = str(
        obj.get("client_reference_id")
        or (obj.get("metadata") or {}).get("checkout_session_id")
        or ""
    ).strip()

    query = Q()
    if provider_id:
        query |= Q(provider_session_id=provider_id)
    if local_id:
        try:
            query |= Q(id=uuid.UUID(local_id))
        except ValueError:
            logger.warning("Webhook carried an invalid local session id", extra={"local_id": local_id})

    if not query:
        return None
    return CheckoutSession.objects.select_for_update().filter(query).first()


def _handle_completed(obj: dict) -> str:
    payment_status = str(obj.get("payment_status") or "").lower()
    if payment_status not in PAID_STATUSES:
        # Async payment methods complete first and settle later
        return "Awaiting payment"

    with transaction.atomic():
        session = _find_session(obj)
        if not session:
            logger.warning("Unknown checkout session", extra={"provider_session_id": obj.get("id")})
            return "Unknown session"

        if session.status != CheckoutSession.STATUS_COMPLETE:
            session.mark_complete()
            if not session.provider_session_id and obj.get("id"):
                session.provider_session_id = str(obj["id"])
            session.save(update_fields=["status", "completed_at", "provider_session_id", "updated_at"])

        order, created = create_order_for_checkout_session(session)

    if not created:
        logger.info("Duplicate webhook ignored", extra={"session_id": str(session.id)})
        return "Already processed"

    logger.info(
        "Checkout session settled",
        extra={"session_id": str(session.id), "order_id": str(order.id)},
    )
    return "Processed"


def _handle_expired(obj: dict) -> str:
    with transaction.atomic():
        session = _find_session(obj)
        if not session:
            return "Unknown session"
        if session.is_terminal:
            return "Already final"
        session.mark_expired()
        session.save(update_fields=["status", "updated_at"])

    logger.info("Checkout session expired by provider", extra={"session_id": str(session.id)})
    return "Expired"


HANDLERS = {
    "checkout.session.completed": _handle_completed,
    "checkout.session.async_payment_succeeded": _handle_completed,
    "checkout.session.expired": _handle_expired,
}


class StripeWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [JSONParser]
    throttle_classes = [WebhookThrottle]

    def post(self, request, *args, **kwargs):
        raw_body = getattr(request, "body", b"") or b""
        signature = request.headers.get("Stripe-Signature")

        try:
            event = construct_webhook_event(payload=raw_body, sig_header=signature)
        except PaymentConfigurationError:
            logger.error("Stripe webhook received but no webhook secret is configured")
            return Response(
                {"ok": False, "detail": "Webhook not configured"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        except InvalidWebhookError as exc:
            logger.warning("Invalid Stripe webhook", extra={"reason": str(exc)})
            return Response({"ok": False, "detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        event_type = str(event.get("type") or "")
        obj = ((event.get("data") or {}).get("object")) or {}

        logger.info("Stripe webhook received", extra={"event_type": event_type, "event_id": event.get("id")})

        handler = HANDLERS.get(event_type)
        if handler is None:
            return Response({"ok": True, "detail": "Ignored"}, status=status.HTTP_200_OK)

        try:
            detail = handler(obj)
        except Exception:
            logger.exception("Unhandled webhook error", extra={"event_type": event_type, "event_id": event.get("id")})
            detail = "Unhandled error"

        return Response({"ok": True, "detail": detail}, status=status.HTTP_200_OK)
