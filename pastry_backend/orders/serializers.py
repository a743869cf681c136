# orders/serializers.py

"""
ORDER SERIALIZERS

Request bodies use the storefront client's camelCase names
(customerName, customerEmail, orderId, ...). Responses are snake_case like
the rest of the API.
"""

from __future__ import annotations

from rest_framework import serializers

from orders.models import Order


class OrderSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    user_id = serializers.UUIDField(read_only=True, allow_null=True)
    checkout_session_id = serializers.UUIDField(read_only=True, allow_null=True)
    items_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_no",
            "user_id",
            "customer_name",
            "customer_email",
            "customer_phone",
            "customer_address",
            "notes",
            "items",
            "items_count",
            "total",
            "currency",
            "status",
            "status_display",
            "is_paid",
            "checkout_session_id",
            "created_at",
            "updated_at",
            "completed_at",
        ]
        read_only_fields = fields


class OrderCreateSerializer(serializers.Serializer):
    """
    Shape only; the required-field rules (and their messages) are enforced by
    orders.services.orders.create_order.
    """

    items = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    customerName = serializers.CharField(required=False, allow_blank=True, default="")
    customerEmail = serializers.EmailField(required=False, allow_blank=True, default="")
    customerPhone = serializers.CharField(required=False, allow_blank=True, default="")
    customerAddress = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderStatusUpdateSerializer(serializers.Serializer):
    orderId = serializers.UUIDField(required=False, allow_null=True)
    status = serializers.CharField(required=False, allow_blank=True, default="")
