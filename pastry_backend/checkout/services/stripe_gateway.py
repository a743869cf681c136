# checkout/services/stripe_gateway.py

"""
STRIPE GATEWAY

Thin wrapper over the Stripe server SDK. Every call resolves the secret key
at request time and passes it per call (no global stripe.api_key).

Secret resolution:
1) settings.PAYMENTS["STRIPE"]["SECRET_KEY"] (env STRIPE_SECRET_KEY)
2) ProviderSecret row "stripe_secret_key" in the database
3) PaymentConfigurationError

Provider failures surface as PaymentProviderError carrying Stripe's message.
"""

from __future__ import annotations

import hashlib
import json
import logging

import stripe
from django.conf import settings

from checkout.models import ProviderSecret
from checkout.services.exceptions import (
    InvalidWebhookError,
    PaymentConfigurationError,
    PaymentProviderError,
)

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "eur"


def _stripe_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = (payments.get("STRIPE") or {}) if isinstance(payments, dict) else {}
    return cfg if isinstance(cfg, dict) else {}


def _fingerprint(secret: str) -> str:
    # Safe to log: identifies which key is in use without leaking it
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()[:12]


def get_secret_key() -> str:
    sk = (_stripe_cfg().get("SECRET_KEY") or "").strip()
    source = "settings"

    if not sk:
        row = (
            ProviderSecret.objects.filter(name=ProviderSecret.NAME_STRIPE_SECRET_KEY)
            .only("value")
            .first()
        )
        sk = (row.value if row else "").strip()
        source = "database"

    if not sk:
        raise PaymentConfigurationError("Stripe secret key not configured")

    logger.debug(
        "Stripe secret key resolved",
        extra={"source": source, "fingerprint": _fingerprint(sk)},
    )
    return sk


def get_currency() -> str:
    return (_stripe_cfg().get("CURRENCY") or DEFAULT_CURRENCY).strip().lower()


def _call(label: str, fn, **params):
    api_key = get_secret_key()
    try:
        return fn(api_key=api_key, **params)
    except stripe.StripeError as exc:
        message = getattr(exc, "user_message", None) or str(exc) or "Stripe request failed"
        logger.warning(
            "Stripe request failed",
            extra={"operation": label, "error": message, "http_status": getattr(exc, "http_status", None)},
        )
        raise PaymentProviderError(message) from exc


def create_checkout_session(
    *,
    line_items: list[dict],
    success_url: str,
    cancel_url: str,
    customer_email: str = "",
    client_reference_id: str = "",
    metadata: dict | None = None,
    mode: str = "payment",
) -> dict:
    """
    Create a hosted checkout page. Returns {"id", "url"}.
    """
    params: dict = {
        "payment_method_types": ["card"],
        "line_items": line_items,
        "mode": mode,
        "success_url": success_url,
        "cancel_url": cancel_url,
    }
    if customer_email:
        params["customer_email"] = customer_email
    if client_reference_id:
        params["client_reference_id"] = client_reference_id
    if metadata:
        params["metadata"] = metadata

    session = _call("checkout.session.create", stripe.checkout.Session.create, **params)
    return {"id": session.id, "url": session.url}


def create_payment_intent(*, amount: int, currency: str = "", customer_email: str = "") -> dict:
    """
    amount is in the smallest currency unit (cents). Returns {"id", "client_secret"}.
    """
    params: dict = {
        "amount": int(amount),
        "currency": (currency or get_currency()).lower(),
    }
    if customer_email:
        params["receipt_email"] = customer_email

    intent = _call("payment_intent.create", stripe.PaymentIntent.create, **params)
    return {"id": intent.id, "client_secret": intent.client_secret}


def create_product_with_price(
    *, name: str, description: str = "", unit_amount: int, currency: str = ""
) -> tuple[str, str]:
    """
    Create a Stripe product and a one-off price for it.
    Returns (product_id, price_id).
    """
    product_params: dict = {"name": name}
    if description:
        # Stripe rejects empty strings
        product_params["description"] = description

    product = _call("product.create", stripe.Product.create, **product_params)
    price = _call(
        "price.create",
        stripe.Price.create,
        product=product.id,
        unit_amount=int(unit_amount),
        currency=(currency or get_currency()).lower(),
    )
    return product.id, price.id


def construct_webhook_event(*, payload: bytes, sig_header: str | None) -> dict:
    """
    Verify the Stripe-Signature header and return the event as a plain dict.
    """
    secret = (_stripe_cfg().get("WEBHOOK_SECRET") or "").strip()
    if not secret:
        raise PaymentConfigurationError("Stripe webhook secret not configured")

    if not sig_header:
        raise InvalidWebhookError("Missing Stripe-Signature header")

    try:
        body = (payload or b"").decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidWebhookError("Webhook payload is not UTF-8") from exc

    try:
        stripe.WebhookSignature.verify_header(
            body, sig_header, secret, tolerance=stripe.Webhook.DEFAULT_TOLERANCE
        )
    except stripe.SignatureVerificationError as exc:
        raise InvalidWebhookError("Invalid signature") from exc

    try:
        event = json.loads(body)
    except ValueError as exc:
        raise InvalidWebhookError("Invalid payload") from exc

    if not isinstance(event, dict):
        raise InvalidWebhookError("Invalid payload")
    return event
