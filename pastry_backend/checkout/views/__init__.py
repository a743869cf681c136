from .admin_sessions import AdminCheckoutSessionsView
from .basket import BasketQuoteView
from .checkout import CheckoutSessionStatusView, CheckoutView
from .provider import CreateCheckoutSessionView, PaymentIntentView
from .stripe_webhook import StripeWebhookView

__all__ = [
    "AdminCheckoutSessionsView",
    "BasketQuoteView",
    "CheckoutView",
    "CheckoutSessionStatusView",
    "CreateCheckoutSessionView",
    "PaymentIntentView",
    "StripeWebhookView",
]
