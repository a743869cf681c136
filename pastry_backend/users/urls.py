# users/urls.py
"""
Mounted at /api/auth/.

register/ and login/ are public; login returns the JWT pair.
jwt/refresh/ trades a refresh token for a new access token.
me/ reads or edits the caller's own profile.
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from users.views import LoginView, MeView, RegisterView

app_name = "users"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    path("jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("me/", MeView.as_view(), name="me"),
]
