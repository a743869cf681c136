from .checkout_session import CheckoutSession
from .provider_secret import ProviderSecret

__all__ = [
    "CheckoutSession",
    "ProviderSecret",
]
