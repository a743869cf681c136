# orders/views/orders.py

"""
ORDERS API

GET  /api/orders/    authenticated
                     admin:    all orders, newest first (?userId=, ?status=)
                     customer: own orders only
POST /api/orders/    public; items priced from the catalog
PUT  /api/orders/    admin; {orderId, status}

Envelope:
    {"success": true, "orders": [...], "count": n}
    {"success": false, "error": "...", "message": "..."}
"""

from __future__ import annotations

import logging
import uuid

from django.db import DatabaseError
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.api import PublicWriteThrottle, fail, first_error
from orders.models import Order
from orders.serializers import OrderCreateSerializer, OrderSerializer, OrderStatusUpdateSerializer
from orders.services.exceptions import InvalidOrderTransition, OrderValidationError
from orders.services.orders import create_order, update_order_status
from users.permissions import IsShopAdmin, is_shop_admin

logger = logging.getLogger(__name__)


class OrderCollectionView(APIView):
    parser_classes = [JSONParser]

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        if self.request.method == "PUT":
            return [IsShopAdmin()]
        return [IsAuthenticated()]

    def get_throttles(self):
        if self.request.method == "POST":
            return [PublicWriteThrottle()]
        return super().get_throttles()

    @extend_schema(
        tags=["Orders"],
        parameters=[
            OpenApiParameter(name="userId", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
        responses={200: OrderSerializer(many=True)},
        description="Admins list every order; customers only their own.",
    )
    def get(self, request, *args, **kwargs):
        qs = Order.objects.all().order_by("-created_at")

        if is_shop_admin(request.user):
            user_id = (request.query_params.get("userId") or "").strip()
            if user_id:
                try:
                    qs = qs.filter(user_id=uuid.UUID(user_id))
                except ValueError:
                    return fail("Invalid userId", status.HTTP_400_BAD_REQUEST)
        else:
            qs = qs.filter(user=request.user)

        status_filter = (request.query_params.get("status") or "").strip().lower()
        if status_filter:
            valid = {value for value, _ in Order.STATUS_CHOICES}
            if status_filter not in valid:
                return fail(f"Invalid status '{status_filter}'", status.HTTP_400_BAD_REQUEST)
            qs = qs.filter(status=status_filter)

        try:
            orders = OrderSerializer(qs, many=True).data
        except DatabaseError as exc:
            logger.exception("Error fetching orders")
            return fail("Failed to fetch orders", status.HTTP_500_INTERNAL_SERVER_ERROR, message=str(exc))

        return Response(
            {"success": True, "orders": orders, "count": len(orders)},
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        tags=["Orders"],
        request=OrderCreateSerializer,
        responses={
            201: OpenApiResponse(description="{success, orderId, orderNo, total, message}"),
            400: OpenApiResponse(description="Validation error"),
            429: OpenApiResponse(description="Rate limited"),
        },
    )
    def post(self, request, *args, **kwargs):
        s = OrderCreateSerializer(data=request.data)
        if not s.is_valid():
            return fail(first_error(s.errors), status.HTTP_400_BAD_REQUEST, errors=s.errors)
        data = s.validated_data

        try:
            order = create_order(
                items=data["items"],
                customer_name=data["customerName"],
                customer_email=data["customerEmail"],
                customer_phone=data["customerPhone"],
                customer_address=data["customerAddress"],
                notes=data["notes"],
                user=request.user,
            )
        except OrderValidationError as exc:
            return fail(str(exc), status.HTTP_400_BAD_REQUEST)
        except DatabaseError as exc:
            logger.exception("Error creating order")
            return fail("Failed to create order", status.HTTP_500_INTERNAL_SERVER_ERROR, message=str(exc))

        return Response(
            {
                "success": True,
                "orderId": str(order.id),
                "orderNo": order.order_no,
                "total": str(order.total),
                "message": "Order created successfully",
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        tags=["Admin"],
        request=OrderStatusUpdateSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(description="Missing fields / invalid transition"),
            404: OpenApiResponse(description="Order not found"),
        },
    )
    def put(self, request, *args, **kwargs):
        s = OrderStatusUpdateSerializer(data=request.data)
        if not s.is_valid():
            return fail(first_error(s.errors), status.HTTP_400_BAD_REQUEST, errors=s.errors)
        data = s.validated_data

        if not data.get("orderId"):
            return fail("Order ID is required", status.HTTP_400_BAD_REQUEST)
        if not data.get("status"):
            return fail("No valid fields to update", status.HTTP_400_BAD_REQUEST)

        try:
            order, changed = update_order_status(order_id=data["orderId"], status=data["status"])
        except Order.DoesNotExist:
            return fail("Order not found", status.HTTP_404_NOT_FOUND)
        except InvalidOrderTransition as exc:
            return fail(str(exc), status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "success": True,
                "message": "Order updated successfully" if changed else "Order already up to date",
                "order": OrderSerializer(order).data,
            },
            status=status.HTTP_200_OK,
        )
