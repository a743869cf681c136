from .auth import LoginView, RegisterView
from .me import MeView

__all__ = [
    "RegisterView",
    "LoginView",
    "MeView",
]
