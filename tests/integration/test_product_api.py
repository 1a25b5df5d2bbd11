"""Integration tests for the Product API.

Covers:
- Public catalog reads (list, categories, retrieve).
- Producer-only management with ownership enforcement.
"""

from __future__ import annotations

import uuid

import pytest

from modules.products.models import Product

pytestmark = pytest.mark.integration

PRODUCTS_URL = "/api/v1/products"


@pytest.fixture()
def producer_client(client_for, producer):
    return client_for(producer)


@pytest.fixture()
def payload():
    return {
        "name": "Ovos caipira",
        "description": "Dúzia de ovos de galinhas criadas soltas.",
        "price": "14.00",
        "category": "Ovos",
        "stock": 20,
        "unit": "dúzia",
    }


class TestPublicCatalog:
    def test_list_without_token(self, api_client, product_a, product_b):
        response = api_client.get(PRODUCTS_URL)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [p["name"] for p in body["data"]] == ["Alface", "Tomate"]
        assert body["data"][1]["price"] == "8.50"

    def test_list_filters(self, api_client, product_a, product_b):
        by_category = api_client.get(PRODUCTS_URL, {"category": "Folhas"}).json()["data"]
        by_search = api_client.get(PRODUCTS_URL, {"search": "toma"}).json()["data"]
        assert [p["name"] for p in by_category] == ["Alface"]
        assert [p["name"] for p in by_search] == ["Tomate"]

    def test_categories(self, api_client, product_a, product_b):
        response = api_client.get(f"{PRODUCTS_URL}/categories")
        assert response.json()["data"] == ["Folhas", "Hortaliças"]

    def test_retrieve(self, api_client, product_a):
        response = api_client.get(f"{PRODUCTS_URL}/{product_a.id}")
        assert response.status_code == 200
        assert response.json()["data"]["producer_id"] == str(product_a.producer_id)

    def test_retrieve_unknown(self, api_client):
        response = api_client.get(f"{PRODUCTS_URL}/{uuid.uuid4()}")
        assert response.status_code == 404


class TestProducerCatalog:
    def test_create(self, producer_client, producer, payload):
        response = producer_client.post(PRODUCTS_URL, payload, format="json")

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["producer_id"] == str(producer.id)
        assert data["unit"] == "dúzia"
        assert Product.objects.filter(id=data["id"]).exists()

    def test_create_validation(self, producer_client, payload):
        payload["description"] = "curta"
        response = producer_client.post(PRODUCTS_URL, payload, format="json")
        assert response.status_code == 400
        assert response.json()["errors"]

    def test_consumer_cannot_create(self, client_for, consumer, payload):
        response = client_for(consumer).post(PRODUCTS_URL, payload, format="json")
        assert response.status_code == 403

    def test_anonymous_cannot_create(self, api_client, payload):
        assert api_client.post(PRODUCTS_URL, payload, format="json").status_code == 401

    def test_my_products(self, producer_client, client_for, other_producer, product_a):
        mine = producer_client.get(f"{PRODUCTS_URL}/my").json()["data"]
        theirs = client_for(other_producer).get(f"{PRODUCTS_URL}/my").json()["data"]
        assert [p["id"] for p in mine] == [str(product_a.id)]
        assert theirs == []

    def test_update(self, producer_client, product_a):
        response = producer_client.put(
            f"{PRODUCTS_URL}/{product_a.id}", {"price": "9.25"}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["data"]["price"] == "9.25"

    def test_update_by_other_producer(self, client_for, other_producer, product_a):
        response = client_for(other_producer).put(
            f"{PRODUCTS_URL}/{product_a.id}", {"price": "1.00"}, format="json"
        )
        assert response.status_code == 403

    def test_set_stock(self, producer_client, product_a):
        response = producer_client.put(
            f"{PRODUCTS_URL}/{product_a.id}/stock", {"stock": 3}, format="json"
        )
        assert response.json()["data"]["stock"] == 3

    def test_negative_stock(self, producer_client, product_a):
        response = producer_client.put(
            f"{PRODUCTS_URL}/{product_a.id}/stock", {"stock": -1}, format="json"
        )
        assert response.status_code == 400

    def test_toggle_availability(self, producer_client, api_client, product_a):
        response = producer_client.put(f"{PRODUCTS_URL}/{product_a.id}/toggle-availability")

        assert response.json()["data"]["is_available"] is False
        assert api_client.get(PRODUCTS_URL).json()["data"] == []

    def test_delete_hides_product(self, producer_client, api_client, product_a):
        response = producer_client.delete(f"{PRODUCTS_URL}/{product_a.id}")

        assert response.status_code == 200
        assert api_client.get(f"{PRODUCTS_URL}/{product_a.id}").status_code == 404
        assert Product.objects.get(id=product_a.id).is_deleted
