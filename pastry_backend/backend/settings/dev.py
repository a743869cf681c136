# backend/settings/dev.py
"""
PATH: backend/settings/dev.py

LOCAL DEVELOPMENT

sqlite by default, DEBUG on, checkout integration on a thread (as in prod)
and DEBUG-level logs for the payment flow.
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import CORS_ALLOWED_ORIGINS, LOGGING

DEBUG = True

# Next/Vite dev servers are reached both ways
CORS_ALLOWED_ORIGINS = sorted(
    {*CORS_ALLOWED_ORIGINS, "http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173"}
)

LOGGING["loggers"].update(
    {
        "checkout": {"level": "DEBUG"},
        "orders": {"level": "DEBUG"},
    }
)
