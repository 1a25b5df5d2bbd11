"""Integration tests for the error side of the response envelope."""

import pytest

pytestmark = pytest.mark.integration


class TestErrorEnvelope:
    def test_unauthenticated(self, api_client):
        response = api_client.get("/api/v1/orders")
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["message"]
        assert "data" not in body

    def test_malformed_json(self, client_for, consumer):
        response = client_for(consumer).post(
            "/api/v1/orders", data="{", content_type="application/json"
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_field_errors_are_listed(self, client_for, consumer):
        response = client_for(consumer).post("/api/v1/orders", {}, format="json")
        body = response.json()
        assert response.status_code == 400
        assert body["message"] == "Invalid data."
        assert isinstance(body["errors"], list)
        assert any(error.startswith("producer_id:") for error in body["errors"])

    def test_domain_error(self, client_for, producer):
        response = client_for(producer).get("/api/v1/orders/not-a-uuid")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Order not-a-uuid not found."}
