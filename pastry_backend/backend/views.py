# backend/views.py

"""
PATH: backend/views.py

PROJECT-LEVEL ENDPOINTS

- GET /api/         route map for the storefront client
- GET /api/health/  database + payment readiness for load balancers
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import DatabaseError, connection
from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import serializers, status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from checkout.services import stripe_gateway
from checkout.services.exceptions import PaymentConfigurationError

logger = logging.getLogger(__name__)

ROUTES = {
    "auth": {
        "register": "/api/auth/register/",
        "login": "/api/auth/login/",
        "me": "/api/auth/me/",
        "refresh": "/api/auth/jwt/refresh/",
    },
    "catalog": {
        "products": "/api/products/",
        "categories": "/api/products/categories/",
    },
    "shop": {
        "basket_quote": "/api/basket/quote/",
        "checkout": "/api/checkout/",
        "orders": "/api/orders/",
    },
    "payments": {
        "create_checkout_session": "/api/create-checkout-session/",
        "payment_intent": "/api/payment-intent/",
        "stripe_webhook": "/api/payments/stripe/webhook/",
    },
    "docs": {"swagger": "/api/docs/", "schema": "/api/schema/"},
}


@extend_schema(
    tags=["Meta"],
    responses=inline_serializer(
        name="ApiRoot",
        fields={"message": serializers.CharField(), "routes": serializers.DictField()},
    ),
)
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response({"message": "Pastry Shop API is running", "routes": ROUTES})


def _payments_state() -> str:
    try:
        stripe_gateway.get_secret_key()
    except PaymentConfigurationError:
        return "unconfigured"
    return "ok"


@extend_schema(
    tags=["Meta"],
    responses={
        200: inline_serializer(
            name="Health",
            fields={
                "status": serializers.CharField(),
                "db": serializers.CharField(),
                "payments": serializers.CharField(),
                "checkout_mode": serializers.CharField(),
            },
        ),
        503: inline_serializer(
            name="HealthDegraded",
            fields={
                "status": serializers.CharField(),
                "db": serializers.CharField(),
                "error": serializers.CharField(),
            },
        ),
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
@throttle_classes([])
def health_check(request):
    """
    The shop can still take direct orders without Stripe, so a missing
    payment key reports "degraded" but keeps answering 200.
    Only a dead database is a 503.
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as exc:
        logger.error("Health check: database unreachable", extra={"error": str(exc)})
        return Response(
            {"status": "down", "db": "down", "error": str(exc)},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    payments = _payments_state()
    return Response(
        {
            "status": "ok" if payments == "ok" else "degraded",
            "db": "ok",
            "payments": payments,
            "checkout_mode": settings.CHECKOUT.get("EXTENSION_MODE", "thread"),
        }
    )
