# checkout/admin.py

from django import forms
from django.contrib import admin

from checkout.models import CheckoutSession, ProviderSecret


@admin.register(CheckoutSession)
class CheckoutSessionAdmin(admin.ModelAdmin):
    """
    View-only: sessions are written by the checkout flow, the integration
    and the Stripe webhook.
    """

    list_display = (
        "id",
        "customer_email",
        "amount_total",
        "currency",
        "status",
        "provider_session_id",
        "created_at",
    )
    list_filter = ("status", "created_at")
    search_fields = ("id", "customer_email", "provider_session_id", "client_reference")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


class ProviderSecretForm(forms.ModelForm):
    value = forms.CharField(widget=forms.PasswordInput(render_value=False))

    class Meta:
        model = ProviderSecret
        fields = ("name", "value")


@admin.register(ProviderSecret)
class ProviderSecretAdmin(admin.ModelAdmin):
    form = ProviderSecretForm
    list_display = ("name", "updated_at")
