# checkout/views/admin_sessions.py

from __future__ import annotations

from collections import OrderedDict

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from checkout.filters import CheckoutSessionFilter
from checkout.models import CheckoutSession
from checkout.serializers import CheckoutSessionAdminSerializer
from users.permissions import IsShopAdmin


class AdminCheckoutSessionsView(APIView):
    """
    GET /api/admin/checkout-sessions/

    Debug listing for the back-office: checkout sessions grouped by customer
    email, newest first, with the field keys each group carries.
    Optional ?status= and ?email= filters.
    """

    permission_classes = [IsShopAdmin]

    @extend_schema(
        tags=["Admin"],
        parameters=[
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="email", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
        responses={200: dict},
    )
    def get(self, request, *args, **kwargs):
        qs = CheckoutSessionFilter(
            request.query_params,
            queryset=CheckoutSession.objects.all().order_by("-created_at"),
        ).qs

        groups: OrderedDict[str, list[dict]] = OrderedDict()
        for row in CheckoutSessionAdminSerializer(qs, many=True).data:
            groups.setdefault(row["customer_email"] or "(no email)", []).append(row)

        customers = []
        for customer_email, sessions in groups.items():
            field_keys = sorted({key for s in sessions for key, value in s.items() if value not in (None, "", [], {})})
            customers.append(
                {
                    "email": customer_email,
                    "sessions": sessions,
                    "count": len(sessions),
                    "field_keys": field_keys,
                }
            )

        return Response(
            {
                "success": True,
                "customers": customers,
                "customer_count": len(customers),
                "count": sum(c["count"] for c in customers),
            },
            status=status.HTTP_200_OK,
        )
