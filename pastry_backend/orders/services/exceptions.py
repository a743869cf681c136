# orders/services/exceptions.py

"""
ORDER SERVICE ERRORS
"""


class OrderServiceError(Exception):
    """Base exception for all order service failures."""


class InvalidOrderTransition(OrderServiceError, ValueError):
    """Raised when an order status change is not allowed."""


class OrderValidationError(OrderServiceError):
    """Raised when order input cannot be priced or is incomplete."""
