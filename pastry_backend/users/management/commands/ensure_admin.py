# users/management/commands/ensure_admin.py

"""
PATH: users/management/commands/ensure_admin.py

Back-office credential bootstrap.

- Reads ADMIN_EMAIL + ADMIN_PASSWORD from env (or --email / --password).
- Idempotent: creates the admin if missing; resets password + flags if it exists.
- Never prints the password.
"""

from __future__ import annotations

import logging
import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Create/update the shop admin account from env vars or options (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--email", default="", help="Admin email (default: $ADMIN_EMAIL)")
        parser.add_argument(
            "--password", default="", help="Admin password (default: $ADMIN_PASSWORD)"
        )

    def handle(self, *args, **options):
        User = get_user_model()

        email = User.objects.normalize_email(options["email"] or os.environ.get("ADMIN_EMAIL") or "")
        password = (options["password"] or os.environ.get("ADMIN_PASSWORD") or "").strip()

        if not email or not password:
            raise CommandError("Admin email and password are required (ADMIN_EMAIL / ADMIN_PASSWORD).")

        with transaction.atomic():
            user = User.objects.filter(email__iexact=email).first()

            if user:
                user.role = User.ROLE_ADMIN
                user.is_active = True
                user.is_staff = True
                user.set_password(password)
                user.save()
                logger.info("Admin credentials updated", extra={"email": email})
                self.stdout.write(self.style.SUCCESS(f"Admin ensured: {email} (updated)"))
                return

            User.objects.create_user(
                email=email,
                password=password,
                role=User.ROLE_ADMIN,
                is_staff=True,
            )

        logger.info("Admin credentials created", extra={"email": email})
        self.stdout.write(self.style.SUCCESS(f"Admin ensured: {email} (created)"))
