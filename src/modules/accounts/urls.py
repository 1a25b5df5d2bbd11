"""Account URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView

from modules.accounts.views import (
    ChangePasswordView,
    DeactivateView,
    LoginView,
    ProfileView,
    RegisterView,
)

urlpatterns = [
    path("auth/register", RegisterView.as_view(), name="auth_register"),
    path("auth/login", LoginView.as_view(), name="auth_login"),
    path("auth/profile", ProfileView.as_view(), name="auth_profile"),
    path(
        "auth/change-password",
        ChangePasswordView.as_view(),
        name="auth_change_password",
    ),
    path("auth/deactivate", DeactivateView.as_view(), name="auth_deactivate"),
    path("auth/token/refresh", TokenRefreshView.as_view(), name="token_refresh"),
    path("auth/token/verify", TokenVerifyView.as_view(), name="token_verify"),
]
