# checkout/views/basket.py

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from checkout.serializers import BasketQuoteSerializer
from checkout.services.basket import reprice
from checkout.services.exceptions import BasketValidationError
from backend.api import PublicPollThrottle, error_response, first_error


class BasketQuoteView(APIView):
    """
    POST /api/basket/quote/

    Reprices a client basket against the catalog so the basket page can show
    server totals before checkout.
    """

    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        tags=["Checkout"],
        request=BasketQuoteSerializer,
        responses={200: dict, 400: OpenApiResponse(description="Validation error")},
    )
    def post(self, request, *args, **kwargs):
        s = BasketQuoteSerializer(data=request.data)
        if not s.is_valid():
            return error_response(first_error(s.errors), status.HTTP_400_BAD_REQUEST, errors=s.errors)

        try:
            basket = reprice(s.validated_data["items"])
        except BasketValidationError as exc:
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "items": basket.snapshot(),
                "total": str(basket.total()),
                "items_count": basket.items_count(),
            },
            status=status.HTTP_200_OK,
        )
