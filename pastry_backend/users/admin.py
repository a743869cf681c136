# users/admin.py

"""
Back-office accounts in Django Admin.

Role changes go through the actions so `role` and `is_staff` stay in step
(User.clean() rejects an admin role without staff).
"""

from __future__ import annotations

from django.contrib import admin, messages
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

User = get_user_model()


@admin.register(User)
class ShopUserAdmin(DjangoUserAdmin):
    ordering = ("-created_at",)
    list_display = ("email", "full_name", "role", "is_staff", "is_active", "created_at")
    list_filter = ("role", "is_active", "is_superuser")
    search_fields = ("email", "first_name", "last_name", "phone")
    readonly_fields = ("last_login", "created_at", "updated_at")
    actions = ("make_shop_admin", "make_customer")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Contact", {"fields": ("first_name", "last_name", "phone")}),
        ("Access", {"fields": ("role", "is_active", "is_staff", "is_superuser")}),
        ("Activity", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "role", "is_staff"),
            },
        ),
    )

    @admin.display(description="Name")
    def full_name(self, obj):
        return obj.full_name or "-"

    @admin.action(description="Grant back-office access")
    def make_shop_admin(self, request, queryset):
        updated = queryset.update(role=User.ROLE_ADMIN, is_staff=True)
        self.message_user(request, f"{updated} account(s) promoted to admin.", messages.SUCCESS)

    @admin.action(description="Revoke back-office access")
    def make_customer(self, request, queryset):
        updated = queryset.exclude(pk=request.user.pk).filter(is_superuser=False).update(
            role=User.ROLE_CUSTOMER, is_staff=False
        )
        self.message_user(request, f"{updated} account(s) set to customer.", messages.SUCCESS)
