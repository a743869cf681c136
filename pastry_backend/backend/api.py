# backend/api.py

"""
Shared pieces of the JSON API used by every app's views:

- anonymous throttle scopes (rates in REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'])
- error envelopes: `fail` for the storefront {"success": false, ...} shape,
  `error_response` for the bare {"error": ...} shape of checkout endpoints
- `first_error` to flatten serializer errors into one message
"""

from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle


class PublicCatalogThrottle(AnonRateThrottle):
    scope = "public_catalog"


class PublicPollThrottle(AnonRateThrottle):
    """
    For polling endpoints (checkout session status, basket quotes).
    """

    scope = "public_poll"


class PublicWriteThrottle(AnonRateThrottle):
    """
    For anonymous writes: auth, guest orders, checkout, provider pass-throughs.
    """

    scope = "public_write"


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


def first_error(errors) -> str:
    if isinstance(errors, dict):
        if "non_field_errors" in errors:
            return first_error(errors["non_field_errors"])
        for value in errors.values():
            return first_error(value)
    if isinstance(errors, list) and errors:
        return first_error(errors[0])
    return str(errors)


def fail(error: str, http_status: int, **extra) -> Response:
    return Response({"success": False, "error": error, **extra}, status=http_status)


def error_response(message: str, http_status: int, **extra) -> Response:
    return Response({"error": message, **extra}, status=http_status)
