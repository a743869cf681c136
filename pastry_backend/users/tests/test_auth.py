# users/tests/test_auth.py

import os
from io import StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.management import CommandError, call_command
from django.test import TestCase
from rest_framework.test import APIClient

User = get_user_model()


class LoginTests(TestCase):
    """
    GUARANTEES:
    - Valid credentials return a JWT pair and the admin flag
    - Invalid credentials are rejected with 401
    - /api/auth/me/ reflects the authenticated account
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email="admin@example.com", password="s3cret-pass", role=User.ROLE_ADMIN, is_staff=True
        )
        self.customer = User.objects.create_user(email="anna@example.com", password="s3cret-pass")

    def test_admin_login_returns_tokens(self):
        res = self.client.post(
            "/api/auth/login/", {"email": "admin@example.com", "password": "s3cret-pass"}, format="json"
        )

        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["is_admin"])
        self.assertEqual(res.data["role"], User.ROLE_ADMIN)
        self.assertTrue(res.data["access"])
        self.assertTrue(res.data["refresh"])

    def test_customer_login_is_not_admin(self):
        res = self.client.post(
            "/api/auth/login/", {"email": "anna@example.com", "password": "s3cret-pass"}, format="json"
        )

        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.data["is_admin"])

    def test_wrong_password_is_rejected(self):
        res = self.client.post(
            "/api/auth/login/", {"email": "admin@example.com", "password": "nope"}, format="json"
        )

        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["detail"], "Invalid credentials")

    def test_me_with_bearer_token(self):
        login = self.client.post(
            "/api/auth/login/", {"email": "anna@example.com", "password": "s3cret-pass"}, format="json"
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")

        res = self.client.get("/api/auth/me/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["email"], "anna@example.com")
        self.assertFalse(res.data["is_admin"])

    def test_me_requires_authentication(self):
        self.assertEqual(self.client.get("/api/auth/me/").status_code, 401)

    def test_register_always_creates_customer(self):
        res = self.client.post(
            "/api/auth/register/",
            {"email": "new@example.com", "password": "An0ther-pass!", "role": "admin"},
            format="json",
        )

        self.assertEqual(res.status_code, 201)
        user = User.objects.get(email="new@example.com")
        self.assertEqual(user.role, User.ROLE_CUSTOMER)
        self.assertFalse(user.is_shop_admin)
        self.assertFalse(res.data["is_admin"])
        self.assertTrue(res.data["access"])

    def test_register_rejects_duplicate_email(self):
        res = self.client.post(
            "/api/auth/register/",
            {"email": "anna@example.com", "password": "An0ther-pass!"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_me_profile_update(self):
        self.client.force_authenticate(self.customer)

        res = self.client.patch(
            "/api/auth/me/",
            {"first_name": "Anna", "last_name": "Esposito", "role": "admin", "email": "x@example.com"},
            format="json",
        )

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["full_name"], "Anna Esposito")
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.role, User.ROLE_CUSTOMER)
        self.assertEqual(self.customer.email, "anna@example.com")

    def test_refresh_token(self):
        login = self.client.post(
            "/api/auth/login/", {"email": "anna@example.com", "password": "s3cret-pass"}, format="json"
        )
        res = self.client.post("/api/auth/jwt/refresh/", {"refresh": login.data["refresh"]}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertIn("access", res.data)


class UserModelTests(TestCase):
    def test_email_is_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="  ", password="x")

    def test_superuser_is_shop_admin(self):
        user = User.objects.create_superuser(email="root@example.com", password="x")
        self.assertTrue(user.is_shop_admin)
        self.assertEqual(user.role, User.ROLE_ADMIN)

    def test_full_name(self):
        user = User(email="a@example.com", first_name="Anna", last_name="Esposito")
        self.assertEqual(user.full_name, "Anna Esposito")


class EnsureAdminCommandTests(TestCase):
    """
    GUARANTEES:
    - Creates the admin when missing, updates it when present (idempotent)
    - Refuses to run without credentials
    """

    def test_creates_admin(self):
        out = StringIO()
        call_command("ensure_admin", email="Boss@Example.com", password="pw-12345", stdout=out)

        user = User.objects.get(email="boss@example.com")
        self.assertTrue(user.is_shop_admin)
        self.assertTrue(user.is_staff)
        self.assertTrue(user.check_password("pw-12345"))
        self.assertIn("created", out.getvalue())
        self.assertNotIn("pw-12345", out.getvalue())

    def test_updates_existing_account(self):
        User.objects.create_user(email="boss@example.com", password="old")

        call_command("ensure_admin", email="boss@example.com", password="new-pass", stdout=StringIO())
        call_command("ensure_admin", email="boss@example.com", password="new-pass", stdout=StringIO())

        self.assertEqual(User.objects.filter(email="boss@example.com").count(), 1)
        user = User.objects.get(email="boss@example.com")
        self.assertEqual(user.role, User.ROLE_ADMIN)
        self.assertTrue(user.check_password("new-pass"))

    @patch.dict(os.environ, {"ADMIN_EMAIL": "", "ADMIN_PASSWORD": ""})
    def test_requires_credentials(self):
        with self.assertRaises(CommandError):
            call_command("ensure_admin", email="", password="", stdout=StringIO())


class EmailCaseTests(TestCase):
    """
    GUARANTEES:
    - Emails are stored lowercase, whatever case they arrive in
    - Login matches the address case-insensitively
    - Addresses that differ only by case cannot register twice
    """

    def setUp(self):
        self.client = APIClient()

    def _login(self, email, password="s3cret-pass"):
        return self.client.post("/api/auth/login/", {"email": email, "password": password}, format="json")

    def test_admin_from_command_logs_in_with_mixed_case(self):
        call_command("ensure_admin", email="Owner@Shop.com", password="s3cret-pass", stdout=StringIO())

        for email in ("Owner@Shop.com", "owner@shop.com", "OWNER@SHOP.COM"):
            with self.subTest(email=email):
                res = self._login(email)
                self.assertEqual(res.status_code, 200)
                self.assertTrue(res.data["is_admin"])

    def test_registered_customer_logs_in_lowercase(self):
        res = self.client.post(
            "/api/auth/register/",
            {"email": "Anna@Example.com", "password": "An0ther-pass!"},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["email"], "anna@example.com")

        res = self._login("anna@example.com", "An0ther-pass!")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["email"], "anna@example.com")

    def test_register_rejects_case_variant_of_existing_email(self):
        User.objects.create_user(email="anna@example.com", password="s3cret-pass")

        res = self.client.post(
            "/api/auth/register/",
            {"email": "ANNA@example.com", "password": "An0ther-pass!"},
            format="json",
        )

        self.assertEqual(res.status_code, 400)
        self.assertEqual(User.objects.filter(email__iexact="anna@example.com").count(), 1)

    def test_wrong_password_still_rejected_case_insensitively(self):
        User.objects.create_user(email="anna@example.com", password="s3cret-pass")
        self.assertEqual(self._login("Anna@Example.com", "nope").status_code, 401)

    def test_inactive_account_cannot_log_in(self):
        User.objects.create_user(email="anna@example.com", password="s3cret-pass", is_active=False)
        self.assertEqual(self._login("anna@example.com").status_code, 401)

    def test_create_user_lowercases_email(self):
        user = User.objects.create_user(email="  Marco@Example.COM ", password="x")
        self.assertEqual(user.email, "marco@example.com")
