# checkout/urls.py
"""
CHECKOUT API URLS

Mounted at /api/ in backend/urls.py (the storefront client calls these
paths directly):

- POST /api/basket/quote/
- POST /api/checkout/
- GET  /api/checkout/sessions/<uuid>/
- POST /api/create-checkout-session/
- POST /api/payment-intent/
- POST /api/payments/stripe/webhook/
- GET  /api/admin/checkout-sessions/
"""

from __future__ import annotations

from django.urls import path

from checkout.views import (
    AdminCheckoutSessionsView,
    BasketQuoteView,
    CheckoutSessionStatusView,
    CheckoutView,
    CreateCheckoutSessionView,
    PaymentIntentView,
    StripeWebhookView,
)

app_name = "checkout"

urlpatterns = [
    path("basket/quote/", BasketQuoteView.as_view(), name="basket-quote"),
    path("checkout/", CheckoutView.as_view(), name="checkout"),
    path(
        "checkout/sessions/<uuid:session_id>/",
        CheckoutSessionStatusView.as_view(),
        name="checkout-session-status",
    ),
    path(
        "create-checkout-session/",
        CreateCheckoutSessionView.as_view(),
        name="create-checkout-session",
    ),
    path("payment-intent/", PaymentIntentView.as_view(), name="payment-intent"),
    path("payments/stripe/webhook/", StripeWebhookView.as_view(), name="stripe-webhook"),
    path(
        "admin/checkout-sessions/",
        AdminCheckoutSessionsView.as_view(),
        name="admin-checkout-sessions",
    ),
]
