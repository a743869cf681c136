# backend/urls.py
"""
PROJECT URLS

Everything the storefront and back-office call is under /api/.
The Django admin lives at settings.ADMIN_PATH; keep that value private
in production.
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from backend.views import api_root, health_check

admin_path = settings.ADMIN_PATH.strip("/") + "/"

api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("auth/", include("users.urls")),
    path("products/", include("products.urls")),
    path("orders/", include("orders.urls")),
    # basket, checkout, provider pass-throughs, webhook, admin sessions
    path("", include("checkout.urls")),
]

urlpatterns = [
    path(admin_path, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
