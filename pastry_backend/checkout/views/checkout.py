# checkout/views/checkout.py

"""
BASKET CHECKOUT

POST /api/checkout/
    Writes a pending checkout session and (by default) waits up to
    CHECKOUT["TIMEOUT_SECONDS"] for the integration to attach the hosted
    payment URL.

    200 {"sessionId", "url"}            redirect the customer
    202 {"sessionId", "status"}         wait=false; poll the session
    400 {"error"}                       invalid basket / customer
    409 {"error"}                       same checkout already in flight
    502 {"error", "sessionId"}          provider error written back
    504 {"error", "sessionId"}          no URL in time (session stays pending)

GET /api/checkout/sessions/<uuid>/
    Poll a session: {"sessionId", "status", "url", "error", ...}

Guard key: Idempotency-Key header, else clientReference, else customer email.
"""

from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from checkout.models import CheckoutSession
from checkout.serializers import CheckoutRequestSerializer, CheckoutSessionStatusSerializer
from checkout.services.checkout_orchestrator import (
    checkout_guard,
    start_checkout,
    wait_for_redirect_url,
)
from checkout.services.exceptions import (
    BasketValidationError,
    CheckoutFailedError,
    CheckoutInProgressError,
    CheckoutTimeoutError,
)
from backend.api import PublicPollThrottle, PublicWriteThrottle, error_response, first_error

logger = logging.getLogger(__name__)


def _guard_key(request, data) -> str:
    return (
        (request.headers.get("Idempotency-Key") or "").strip()
        or (data.get("clientReference") or "").strip()
        or data["customer"]["email"]
    )


class CheckoutView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        tags=["Checkout"],
        request=CheckoutRequestSerializer,
        parameters=[
            OpenApiParameter(
                name="Idempotency-Key",
                type=str,
                location=OpenApiParameter.HEADER,
                required=False,
            ),
        ],
        responses={
            200: OpenApiResponse(description="Redirect URL ready"),
            202: OpenApiResponse(description="Session created; poll for the URL"),
            400: OpenApiResponse(description="Validation error"),
            409: OpenApiResponse(description="Checkout already in progress"),
            429: OpenApiResponse(description="Rate limited"),
            502: OpenApiResponse(description="Payment provider error"),
            504: OpenApiResponse(description="Timed out waiting for payment page"),
        },
    )
    def post(self, request, *args, **kwargs):
        s = CheckoutRequestSerializer(data=request.data)
        if not s.is_valid():
            return error_response(first_error(s.errors), status.HTTP_400_BAD_REQUEST, errors=s.errors)
        data = s.validated_data

        key = _guard_key(request, data)
        reference = (request.headers.get("Idempotency-Key") or data.get("clientReference") or "").strip()
        session = None

        try:
            with checkout_guard.hold(key):
                session = start_checkout(
                    items=data["items"],
                    customer=data["customer"],
                    success_url=data["successUrl"],
                    cancel_url=data["cancelUrl"],
                    user=request.user,
                    client_reference=reference,
                )

                if not data["wait"]:
                    session.refresh_from_db(fields=["status"])
                    return Response(
                        {"sessionId": str(session.id), "status": session.status},
                        status=status.HTTP_202_ACCEPTED,
                    )

                url = wait_for_redirect_url(session.id)

        except CheckoutInProgressError as exc:
            logger.info("Duplicate checkout submission rejected")
            return error_response(str(exc), status.HTTP_409_CONFLICT)

        except BasketValidationError as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)

        except CheckoutFailedError as exc:
            logger.warning(
                "Checkout failed",
                extra={"session_id": str(session.id) if session else None, "error": str(exc)},
            )
            return error_response(
                str(exc),
                status.HTTP_502_BAD_GATEWAY,
                sessionId=str(session.id) if session else None,
            )

        except CheckoutTimeoutError as exc:
            return error_response(
                str(exc),
                status.HTTP_504_GATEWAY_TIMEOUT,
                sessionId=str(session.id) if session else None,
            )

        return Response({"sessionId": str(session.id), "url": url}, status=status.HTTP_200_OK)


class CheckoutSessionStatusView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        tags=["Checkout"],
        responses={
            200: CheckoutSessionStatusSerializer,
            404: OpenApiResponse(description="Unknown session"),
        },
    )
    def get(self, request, session_id, *args, **kwargs):
        session = get_object_or_404(CheckoutSession, id=session_id)
        return Response(CheckoutSessionStatusSerializer(session).data, status=status.HTTP_200_OK)
