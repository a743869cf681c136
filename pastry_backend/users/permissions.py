# users/permissions.py

from rest_framework.permissions import BasePermission


def is_shop_admin(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "is_shop_admin", False))


class IsShopAdmin(BasePermission):
    """
    Back-office gate: authenticated admin (role=admin), staff or superuser.
    """

    message = "Admin access required."

    def has_permission(self, request, view):
        return is_shop_admin(request.user)
