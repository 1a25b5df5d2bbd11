from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from modules.accounts.constants import UserRole
from modules.accounts.models import User
from modules.products.models import Product

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_user():
    counter = {"n": 0}

    def _make(role: str, **extra) -> User:
        counter["n"] += 1
        email = extra.pop("email", f"{role}{counter['n']}@example.com")
        return User.objects.create_user(
            email=email,
            password=extra.pop("password", DEFAULT_PASSWORD),
            username=extra.pop("username", f"{role} {counter['n']}"),
            role=role,
            **extra,
        )

    return _make


@pytest.fixture()
def producer(make_user):
    return make_user(UserRole.PRODUCER, email="producer@example.com")


@pytest.fixture()
def other_producer(make_user):
    return make_user(UserRole.PRODUCER, email="other-producer@example.com")


@pytest.fixture()
def consumer(make_user):
    return make_user(UserRole.CONSUMER, email="consumer@example.com")


@pytest.fixture()
def other_consumer(make_user):
    return make_user(UserRole.CONSUMER, email="other-consumer@example.com")


@pytest.fixture()
def courier(make_user):
    return make_user(UserRole.LOGISTICS, email="courier@example.com")


@pytest.fixture()
def other_courier(make_user):
    return make_user(UserRole.LOGISTICS, email="other-courier@example.com")


@pytest.fixture()
def client_for():
    """Build an APIClient authenticated as ``user``."""

    def _client(user: User) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product(producer):
    def _make(**overrides) -> Product:
        data = {
            "producer": producer,
            "name": "Tomate orgânico",
            "description": "Tomate colhido no dia, sem agrotóxicos.",
            "price": Decimal("8.50"),
            "stock": 50,
            "unit": "kg",
            "category": "Hortaliças",
        }
        data.update(overrides)
        return Product.objects.create(**data)

    return _make


@pytest.fixture()
def product_a(make_product):
    return make_product(name="Tomate", price=Decimal("8.50"), stock=50, unit="kg")


@pytest.fixture()
def product_b(make_product):
    return make_product(
        name="Alface", price=Decimal("3.00"), stock=30, unit="unidade", category="Folhas"
    )


@pytest.fixture()
def delivery_address():
    return {"street": "Rua das Flores", "number": "123", "city": "Campinas"}
