# checkout/filters.py

import django_filters

from checkout.models import CheckoutSession


class CheckoutSessionFilter(django_filters.FilterSet):
    """
    Back-office filters for checkout sessions.

    ?status=open      exact lifecycle state (case-insensitive input)
    ?email=a@b.com    customer email, case-insensitive
    """

    status = django_filters.CharFilter(method="filter_status")
    email = django_filters.CharFilter(field_name="customer_email", lookup_expr="iexact")

    class Meta:
        model = CheckoutSession
        fields = ["status", "email"]

    def filter_status(self, queryset, name, value):
        value = (value or "").strip().lower()
        if not value:
            return queryset
        return queryset.filter(status=value)
