"""Account API views.

Registration and login are public; profile operations require a
Bearer token.  Domain exceptions propagate to the project exception
handler, which renders the response envelope.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.accounts.dtos import (
    ChangePasswordDTO,
    LoginDTO,
    RegisterUserDTO,
    UpdateProfileDTO,
)
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.accounts.serializers import (
    ChangePasswordSerializer,
    LoginSerializer,
    RegisterSerializer,
    UpdateProfileSerializer,
    UserSerializer,
)
from modules.accounts.services import AccountService
from modules.core.authentication import get_actor
from modules.core.responses import envelope


class _AccountView(APIView):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AccountService(repository=UserDjangoRepository())


class RegisterView(_AccountView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(request=RegisterSerializer, responses={201: UserSerializer})
    def post(self, request: Request) -> Response:
        """POST /api/v1/auth/register"""
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, tokens = self._service.register(
            RegisterUserDTO(**serializer.validated_data)
        )
        return envelope(
            {"user": UserSerializer(user).data, "tokens": tokens},
            message="User registered successfully.",
            status_code=status.HTTP_201_CREATED,
        )


class LoginView(_AccountView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(request=LoginSerializer, responses={200: UserSerializer})
    def post(self, request: Request) -> Response:
        """POST /api/v1/auth/login"""
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, tokens = self._service.login(LoginDTO(**serializer.validated_data))
        return envelope(
            {"user": UserSerializer(user).data, "tokens": tokens},
            message="Login successful.",
        )


class ProfileView(_AccountView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: UserSerializer})
    def get(self, request: Request) -> Response:
        """GET /api/v1/auth/profile"""
        user = self._service.get_user(str(get_actor(request).id))
        return envelope(UserSerializer(user).data)

    @extend_schema(request=UpdateProfileSerializer, responses={200: UserSerializer})
    def put(self, request: Request) -> Response:
        """PUT /api/v1/auth/profile

        ``profile`` is merged into the stored document, not replaced.
        """
        serializer = UpdateProfileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = self._service.update_profile(
            get_actor(request), UpdateProfileDTO(**serializer.validated_data)
        )
        return envelope(
            UserSerializer(user).data, message="Profile updated successfully."
        )


class ChangePasswordView(_AccountView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=ChangePasswordSerializer, responses={200: None})
    def put(self, request: Request) -> Response:
        """PUT /api/v1/auth/change-password"""
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self._service.change_password(
            get_actor(request), ChangePasswordDTO(**serializer.validated_data)
        )
        return envelope(message="Password changed successfully.")


class DeactivateView(_AccountView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: None})
    def delete(self, request: Request) -> Response:
        """DELETE /api/v1/auth/deactivate"""
        self._service.deactivate(get_actor(request))
        return envelope(message="Account deactivated successfully.")
