# checkout/views/provider.py

"""
PROVIDER PASS-THROUGHS

POST /api/create-checkout-session/
    {items: [{price, quantity}], successUrl, cancelUrl} -> {url}

POST /api/payment-intent/
    {amount (cents), currency, customerEmail} -> {clientSecret}

Both resolve the Stripe secret at request time and answer
500 {"error": "..."} when the provider (or its configuration) fails.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from checkout.serializers import PaymentIntentSerializer, ProviderCheckoutSessionSerializer
from checkout.services import stripe_gateway
from checkout.services.exceptions import PaymentConfigurationError, PaymentProviderError
from backend.api import PublicWriteThrottle, error_response, first_error

logger = logging.getLogger(__name__)


class CreateCheckoutSessionView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        tags=["Payments"],
        request=ProviderCheckoutSessionSerializer,
        responses={
            200: OpenApiResponse(description="{url}"),
            400: OpenApiResponse(description="Validation error"),
            500: OpenApiResponse(description="Provider error"),
        },
    )
    def post(self, request, *args, **kwargs):
        s = ProviderCheckoutSessionSerializer(data=request.data)
        if not s.is_valid():
            return error_response(first_error(s.errors), status.HTTP_400_BAD_REQUEST, errors=s.errors)
        data = s.validated_data

        line_items = [dict(item) for item in data["items"]]

        try:
            session = stripe_gateway.create_checkout_session(
                line_items=line_items,
                success_url=data["successUrl"],
                cancel_url=data["cancelUrl"],
            )
        except (PaymentConfigurationError, PaymentProviderError) as exc:
            logger.error("Error creating checkout session", extra={"error": str(exc)})
            return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({"url": session["url"]}, status=status.HTTP_200_OK)


class PaymentIntentView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        tags=["Payments"],
        request=PaymentIntentSerializer,
        responses={
            200: OpenApiResponse(description="{clientSecret}"),
            400: OpenApiResponse(description="Validation error"),
            500: OpenApiResponse(description="Provider error"),
        },
    )
    def post(self, request, *args, **kwargs):
        s = PaymentIntentSerializer(data=request.data)
        if not s.is_valid():
            return error_response(first_error(s.errors), status.HTTP_400_BAD_REQUEST, errors=s.errors)
        data = s.validated_data

        try:
            intent = stripe_gateway.create_payment_intent(
                amount=data["amount"],
                currency=data["currency"],
                customer_email=data["customerEmail"],
            )
        except (PaymentConfigurationError, PaymentProviderError) as exc:
            logger.error("Error creating payment intent", extra={"error": str(exc)})
            return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({"clientSecret": intent["client_secret"]}, status=status.HTTP_200_OK)
