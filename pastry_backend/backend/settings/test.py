# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- In-memory SQLite
- Checkout integration runs inline by default; thread mode is opted into per test
- Short checkout wait so timeout paths stay fast
- Throttle rates high enough that the suite never trips them
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import CHECKOUT, PAYMENTS, REST_FRAMEWORK

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

PAYMENTS = {
    "STRIPE": {
        **PAYMENTS["STRIPE"],
        "SECRET_KEY": "",
        "WEBHOOK_SECRET": "whsec_test",
        "CURRENCY": "eur",
    }
}

CHECKOUT = {
    **CHECKOUT,
    "TIMEOUT_SECONDS": 0.2,
    "POLL_INTERVAL_SECONDS": 0.01,
    "EXTENSION_MODE": "inline",
}

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_RATES": {
        scope: "10000/min" for scope in REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]
    },
}
