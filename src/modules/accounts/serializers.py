"""Account DRF serializers for API input/output.

Input serializers only shape the request; business rules live in the
Service Layer, which receives Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.accounts.constants import UserRole
from modules.accounts.models import User

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField()
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=UserRole.choices)
    profile = serializers.DictField(required=False, default=dict)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class UpdateProfileSerializer(serializers.Serializer):
    username = serializers.CharField(required=False)
    profile = serializers.DictField(required=False)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class UserSerializer(serializers.ModelSerializer):
    """Public representation of a user: never includes the password hash."""

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "role",
            "profile",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
