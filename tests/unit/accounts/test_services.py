"""Unit tests for ``AccountService``."""

from __future__ import annotations

import pytest
from rest_framework_simplejwt.tokens import AccessToken

from modules.accounts.dtos import (
    ChangePasswordDTO,
    LoginDTO,
    RegisterUserDTO,
    UpdateProfileDTO,
)
from modules.accounts.exceptions import EmailAlreadyRegistered, InvalidCredentials
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.accounts.services import AccountService
from modules.core.authentication import Actor
from modules.core.exceptions import ValidationError

pytestmark = pytest.mark.unit

PASSWORD = "secret123"


@pytest.fixture()
def service():
    return AccountService(repository=UserDjangoRepository())


class TestRegister:
    def test_register_issues_tokens(self, service):
        user, tokens = service.register(
            RegisterUserDTO(
                username="Sítio Boa Vista",
                email="Sitio@Example.com",
                password=PASSWORD,
                role="producer",
                profile={"farm_name": "Boa Vista"},
            )
        )

        assert user.email == "sitio@example.com"
        assert user.role == "producer"
        assert user.check_password(PASSWORD)
        assert user.profile == {"farm_name": "Boa Vista"}
        assert AccessToken(tokens["access"])["user_id"] == str(user.id)
        assert tokens["refresh"]

    def test_duplicate_email(self, service, consumer):
        dto = RegisterUserDTO(
            username="Outra", email="CONSUMER@example.com", password=PASSWORD, role="consumer"
        )
        with pytest.raises(EmailAlreadyRegistered):
            service.register(dto)


class TestLogin:
    def test_login(self, service, consumer):
        user, tokens = service.login(
            LoginDTO(email="consumer@example.com", password=PASSWORD)
        )
        assert user.id == consumer.id
        assert set(tokens) == {"access", "refresh"}

    @pytest.mark.parametrize(
        "email,password",
        [("consumer@example.com", "wrong-pass"), ("nobody@example.com", PASSWORD)],
    )
    def test_bad_credentials(self, service, consumer, email, password):
        with pytest.raises(InvalidCredentials):
            service.login(LoginDTO(email=email, password=password))

    def test_deactivated_account(self, service, consumer):
        service.deactivate(Actor.from_user(consumer))

        with pytest.raises(InvalidCredentials, match="deactivated"):
            service.login(LoginDTO(email="consumer@example.com", password=PASSWORD))


class TestProfile:
    def test_profile_is_merged(self, service, make_user):
        user = make_user("consumer", profile={"phone": "1199999", "city": "Campinas"})

        updated = service.update_profile(
            Actor.from_user(user), UpdateProfileDTO(profile={"city": "Jundiaí"})
        )

        assert updated.profile == {"phone": "1199999", "city": "Jundiaí"}

    def test_username_change(self, service, consumer):
        updated = service.update_profile(
            Actor.from_user(consumer), UpdateProfileDTO(username="Maria")
        )
        assert updated.username == "Maria"

    def test_change_password(self, service, consumer):
        service.change_password(
            Actor.from_user(consumer),
            ChangePasswordDTO(current_password=PASSWORD, new_password="novasenha"),
        )
        consumer.refresh_from_db()
        assert consumer.check_password("novasenha")

    def test_change_password_requires_current(self, service, consumer):
        with pytest.raises(ValidationError):
            service.change_password(
                Actor.from_user(consumer),
                ChangePasswordDTO(current_password="nope", new_password="novasenha"),
            )

    def test_deactivate(self, service, consumer):
        service.deactivate(Actor.from_user(consumer))
        consumer.refresh_from_db()
        assert consumer.is_active is False
