"""
PATH: users/auth_backends.py

AUTH BACKEND: email login, case-insensitive

- The API calls authenticate(email=...); the Django admin login form passes
  the same address as username=...
- Inactive accounts never authenticate.

Permissions for the Django admin still come from ModelBackend, listed after
this one in AUTHENTICATION_BACKENDS.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import BaseBackend

User = get_user_model()


class EmailBackend(BaseBackend):
    def authenticate(self, request, username=None, password=None, **kwargs):
        identifier = (kwargs.get("email") or username or "").strip()
        if not identifier or password is None:
            return None

        user = User.objects.filter(email__iexact=identifier).first()
        if user is None:
            # Same hashing cost as a wrong password
            User().set_password(password)
            return None

        if not user.is_active:
            return None

        if user.check_password(password):
            return user

        return None

    def get_user(self, user_id):
        try:
            return User.objects.get(pk=user_id)
        except User.DoesNotExist:
            return None
