# backend/settings/prod.py
"""
PATH: backend/settings/prod.py

PRODUCTION

Fails closed at import time: a misconfigured deploy refuses to boot instead
of serving a shop that silently cannot take payments.

Required: SECRET_KEY, ALLOWED_HOSTS, a Postgres DATABASE_URL,
STRIPE_WEBHOOK_SECRET (webhooks are the only way checkout orders get
created), https CORS/CSRF origins. CHECKOUT_EXTENSION_MODE may not be "off".
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403
from .base import BASE_DIR, CHECKOUT, MIDDLEWARE, PAYMENTS, SECRET_KEY, env


def _require(condition, message: str):
    if not condition:
        raise ImproperlyConfigured(message)


DEBUG = False

_require(
    SECRET_KEY and SECRET_KEY != "dev-insecure-change-me",
    "SECRET_KEY must be set to a strong value in production.",
)

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=[])
_require(ALLOWED_HOSTS, "ALLOWED_HOSTS must be set in production.")

# ---------------- DATABASE (Postgres only) ----------------
_database_url = (env("DATABASE_URL", default="") or "").strip()
_require(_database_url, "DATABASE_URL must be set in production.")
_require(
    _database_url.startswith(("postgres://", "postgresql://", "pgsql://")),
    "Production DATABASE_URL must point at Postgres.",
)

DATABASES = {"default": env.db("DATABASE_URL")}
DATABASES["default"]["CONN_MAX_AGE"] = env.int("DB_CONN_MAX_AGE", default=60)

# ---------------- PAYMENTS / CHECKOUT ----------------
_require(
    PAYMENTS["STRIPE"]["WEBHOOK_SECRET"],
    "STRIPE_WEBHOOK_SECRET must be set in production.",
)
_require(
    CHECKOUT["EXTENSION_MODE"] != "off",
    "CHECKOUT_EXTENSION_MODE=off would leave every checkout session pending.",
)

# ---------------- STATIC (WhiteNoise) ----------------
STATIC_ROOT = env("STATIC_ROOT", default=str(BASE_DIR / "staticfiles"))

MIDDLEWARE.insert(
    MIDDLEWARE.index("django.middleware.security.SecurityMiddleware") + 1,
    "whitenoise.middleware.WhiteNoiseMiddleware",
)
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# ---------------- HTTPS / COOKIES / HEADERS ----------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=True)
SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", default=3600)
SECURE_HSTS_INCLUDE_SUBDOMAINS = env.bool("SECURE_HSTS_INCLUDE_SUBDOMAINS", default=True)
SECURE_HSTS_PRELOAD = env.bool("SECURE_HSTS_PRELOAD", default=False)

SESSION_COOKIE_SECURE = CSRF_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = CSRF_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = CSRF_COOKIE_SAMESITE = "Lax"

SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
SECURE_CROSS_ORIGIN_OPENER_POLICY = "same-origin"
X_FRAME_OPTIONS = "DENY"

# ---------------- CORS / CSRF (https, no localhost) ----------------
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=[])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=[])

for _name, _origins in (
    ("CORS_ALLOWED_ORIGINS", CORS_ALLOWED_ORIGINS),
    ("CSRF_TRUSTED_ORIGINS", CSRF_TRUSTED_ORIGINS),
):
    _require(_origins, f"{_name} must be set in production.")
    _require(
        not any("localhost" in o or "127.0.0.1" in o for o in _origins),
        f"Remove localhost from {_name} in production.",
    )
    _require(
        all(o.startswith("https://") for o in _origins),
        f"{_name} must be https:// in production.",
    )

# JWT in headers; cookies are only used by the Django admin
CORS_ALLOW_CREDENTIALS = False
