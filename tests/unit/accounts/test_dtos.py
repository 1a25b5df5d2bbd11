"""Unit tests for account DTO validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from modules.accounts.dtos import ChangePasswordDTO, RegisterUserDTO, UpdateProfileDTO

pytestmark = pytest.mark.unit

VALID = {
    "username": "Joana",
    "email": "joana@example.com",
    "password": "secret123",
    "role": "consumer",
}


class TestRegisterUserDTO:
    def test_valid(self):
        dto = RegisterUserDTO(**VALID)
        assert dto.role == "consumer"
        assert dto.profile == {}

    @pytest.mark.parametrize(
        "field,value",
        [
            ("username", "J"),
            ("email", "not-an-email"),
            ("password", "12345"),
            ("role", "admin"),
        ],
    )
    def test_invalid(self, field, value):
        with pytest.raises(ValidationError):
            RegisterUserDTO(**{**VALID, field: value})


def test_profile_update_is_partial():
    dto = UpdateProfileDTO(profile={"phone": "123"})
    assert dto.username is None


def test_new_password_length():
    with pytest.raises(ValidationError, match="at least 6"):
        ChangePasswordDTO(current_password="x", new_password="abc")
