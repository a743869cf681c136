# users/views/auth.py

"""
Email + password auth for storefront customers and the back-office.

Both endpoints answer with the same token envelope so the client can sign
the user in straight after registering:

    {message, user_id, email, role, is_admin, access, refresh}

`is_admin` tells the client whether to unlock the admin pages.
"""

import logging

from django.contrib.auth import authenticate
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from backend.api import PublicWriteThrottle
from users.serializers import AuthTokenResponseSerializer, LoginSerializer, RegisterSerializer

logger = logging.getLogger(__name__)


def token_envelope(user, message: str) -> dict:
    refresh = RefreshToken.for_user(user)
    return {
        "message": message,
        "user_id": user.id,
        "email": user.email,
        "role": user.role,
        "is_admin": user.is_shop_admin,
        "access": str(refresh.access_token),
        "refresh": str(refresh),
    }


class RegisterView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [PublicWriteThrottle]
    serializer_class = RegisterSerializer

    @extend_schema(
        tags=["Auth"],
        request=RegisterSerializer,
        responses={
            201: AuthTokenResponseSerializer,
            400: OpenApiResponse(description="Validation error"),
        },
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info("Customer registered", extra={"user_id": str(user.id)})
        return Response(
            token_envelope(user, "User registered successfully"),
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [PublicWriteThrottle]
    serializer_class = LoginSerializer

    @extend_schema(
        tags=["Auth"],
        request=LoginSerializer,
        responses={
            200: AuthTokenResponseSerializer,
            401: OpenApiResponse(description="Invalid credentials"),
        },
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        creds = serializer.validated_data

        user = authenticate(request=request, email=creds["email"], password=creds["password"])
        if user is None:
            # The address is not logged: failed logins are often typos of real ones
            logger.warning("Failed login attempt")
            return Response({"detail": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)

        return Response(token_envelope(user, "Login successful"), status=status.HTTP_200_OK)
