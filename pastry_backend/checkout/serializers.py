# checkout/serializers.py

"""
PATH: checkout/serializers.py

CHECKOUT SERIALIZERS

Transport-layer contracts only (request/response shapes). Pricing and session
rules live in checkout/services.

Field names follow the storefront client (camelCase bodies).
"""

from __future__ import annotations

from django.conf import settings
from rest_framework import serializers

from checkout.models import CheckoutSession


def _frontend_url(path: str) -> str:
    base = (getattr(settings, "FRONTEND_BASE_URL", "") or "http://localhost:3000").rstrip("/")
    return f"{base}{path}"


class BasketLineSerializer(serializers.Serializer):
    """
    Accepts either {"product_id": ...} or the client basket's {"id": ...}.
    """

    product_id = serializers.UUIDField(required=False)
    id = serializers.UUIDField(required=False)
    quantity = serializers.IntegerField(min_value=1)

    def validate(self, attrs):
        product_id = attrs.get("product_id") or attrs.get("id")
        if not product_id:
            raise serializers.ValidationError("product_id is required")
        return {"product_id": str(product_id), "quantity": attrs["quantity"]}


class CustomerSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, default="")
    email = serializers.EmailField()
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    address = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BasketQuoteSerializer(serializers.Serializer):
    items = BasketLineSerializer(
        many=True,
        allow_empty=False,
        error_messages={"empty": "Items are required", "required": "Items are required"},
    )


class CheckoutRequestSerializer(serializers.Serializer):
    items = BasketLineSerializer(
        many=True,
        allow_empty=False,
        error_messages={"empty": "Items are required", "required": "Items are required"},
    )
    customer = CustomerSerializer()
    successUrl = serializers.URLField(required=False, max_length=1000)
    cancelUrl = serializers.URLField(required=False, max_length=1000)
    clientReference = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")
    wait = serializers.BooleanField(required=False, default=True)

    def validate(self, attrs):
        attrs.setdefault(
            "successUrl", _frontend_url("/orders?session_id={CHECKOUT_SESSION_ID}")
        )
        attrs.setdefault("cancelUrl", _frontend_url("/basket"))
        return attrs


class CheckoutSessionStatusSerializer(serializers.ModelSerializer):
    sessionId = serializers.UUIDField(source="id", read_only=True)

    class Meta:
        model = CheckoutSession
        fields = ["sessionId", "status", "url", "error", "amount_total", "currency", "created_at"]
        read_only_fields = fields


class CheckoutSessionAdminSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = CheckoutSession
        fields = [
            "id",
            "user_id",
            "customer_email",
            "customer",
            "line_items",
            "basket",
            "amount_total",
            "currency",
            "mode",
            "success_url",
            "cancel_url",
            "status",
            "url",
            "provider_session_id",
            "error",
            "client_reference",
            "created_at",
            "updated_at",
            "completed_at",
        ]
        read_only_fields = fields


# ---------------- PROVIDER PASS-THROUGHS ----------------
class ProviderLineItemSerializer(serializers.Serializer):
    price = serializers.CharField(required=False)
    price_data = serializers.DictField(required=False)
    quantity = serializers.IntegerField(min_value=1)

    def validate(self, attrs):
        if not attrs.get("price") and not attrs.get("price_data"):
            raise serializers.ValidationError("Each item needs a price or price_data")
        return attrs


class ProviderCheckoutSessionSerializer(serializers.Serializer):
    items = ProviderLineItemSerializer(
        many=True,
        allow_empty=False,
        error_messages={"empty": "Items are required", "required": "Items are required"},
    )
    successUrl = serializers.URLField(max_length=1000)
    cancelUrl = serializers.URLField(max_length=1000)


class PaymentIntentSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1)
    currency = serializers.CharField(required=False, allow_blank=True, max_length=8, default="")
    customerEmail = serializers.EmailField(required=False, allow_blank=True, default="")
