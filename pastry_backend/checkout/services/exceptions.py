# checkout/services/exceptions.py

"""
CHECKOUT SERVICE ERRORS

Centralized domain errors for basket, checkout-session and payment services.
"""


class CheckoutServiceError(Exception):
    """Base exception for all checkout service failures."""


class InvalidSessionTransition(CheckoutServiceError, ValueError):
    """Raised when a checkout session is moved out of a terminal state."""


class BasketValidationError(CheckoutServiceError):
    """Raised when basket lines cannot be priced against the catalog."""


class CheckoutInProgressError(CheckoutServiceError):
    """Raised when the same checkout is already being submitted."""


class CheckoutTimeoutError(CheckoutServiceError):
    """Raised when no redirect URL shows up before the wait expires."""


class CheckoutFailedError(CheckoutServiceError):
    """Raised when the integration wrote an error back to the session."""


class PaymentConfigurationError(CheckoutServiceError):
    """Raised when no payment provider secret can be resolved."""


class PaymentProviderError(CheckoutServiceError):
    """Raised when the payment provider rejects or fails a request."""


class InvalidWebhookError(CheckoutServiceError):
    """Raised when a webhook payload fails signature verification or parsing."""
