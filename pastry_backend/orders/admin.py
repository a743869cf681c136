# orders/admin.py

from django.contrib import admin

from orders.models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_no",
        "customer_name",
        "customer_email",
        "total",
        "status",
        "is_paid",
        "created_at",
        "completed_at",
    )
    list_filter = ("status", "is_paid", "created_at")
    search_fields = ("order_no", "customer_name", "customer_email")
    ordering = ("-created_at",)
    readonly_fields = (
        "order_no",
        "items",
        "total",
        "currency",
        "is_paid",
        "checkout_session",
        "created_at",
        "updated_at",
        "completed_at",
    )
