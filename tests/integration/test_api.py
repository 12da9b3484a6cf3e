"""
API tests through the Flask test client.

Covers the JSON envelope, route wiring and the error-kind to status-code
mapping end to end.
"""

import pytest


def _create_pet(client, **overrides):
    body = {
        "name": "Rex",
        "price": "120.00",
        "category": {"name": "Dogs"},
        "tags": [{"name": "friendly"}],
        "photo_urls": ["https://example.com/rex.jpg"],
    }
    body.update(overrides)
    return client.post("/pets", json=body)


def _create_customer(client, name="Ada"):
    response = client.post("/customers", json={"name": name, "email": "ada@example.com"})
    return response.get_json()["data"]


@pytest.mark.api
@pytest.mark.integration
class TestPetEndpoints:
    def test_create_and_get_pet(self, client):
        response = _create_pet(client)

        assert response.status_code == 201
        created = response.get_json()["data"]
        assert created["status"] == "available"
        assert created["price"] == "120.00"
        assert created["category"]["name"] == "Dogs"

        fetched = client.get(f"/pets/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.get_json()["data"]["name"] == "Rex"

    @pytest.mark.parametrize("price", ["-1", "10.005", "100000000"])
    def test_create_invalid_price(self, client, price):
        response = _create_pet(client, price=price)

        assert response.status_code == 400
        body = response.get_json()
        assert body["error"] == "validation_error"
        assert body["data"] == {"field": "price"}

    def test_create_duplicate_name(self, client):
        _create_pet(client)
        response = _create_pet(client)

        assert response.status_code == 422
        assert response.get_json()["error"] == "duplicate"

    def test_create_sold_pet_rejected(self, client):
        response = _create_pet(client, status="sold")
        assert response.status_code == 409

    def test_get_missing_pet(self, client):
        response = client.get("/pets/999")

        assert response.status_code == 404
        assert response.get_json()["error"] == "not_found"

    def test_update_pet_with_version(self, client):
        pet = _create_pet(client).get_json()["data"]

        ok = client.put(f"/pets/{pet['id']}", json={"price": "80", "version": pet["version"]})
        assert ok.status_code == 200
        assert ok.get_json()["data"]["version"] == pet["version"] + 1

        stale = client.put(f"/pets/{pet['id']}", json={"price": "70", "version": pet["version"]})
        assert stale.status_code == 409
        assert stale.get_json()["error"] == "conflict"

    def test_status_patch_and_retire(self, client):
        pet = _create_pet(client).get_json()["data"]

        retired = client.delete(f"/pets/{pet['id']}")
        assert retired.get_json()["data"]["status"] == "withdrawn"

        reinstated = client.patch(f"/pets/{pet['id']}/status", json={"status": "available"})
        assert reinstated.status_code == 200
        assert reinstated.get_json()["data"]["status"] == "available"

        sold = client.patch(f"/pets/{pet['id']}/status", json={"status": "sold"})
        assert sold.status_code == 409
        assert sold.get_json()["error"] == "invalid_state"

    def test_find_by_status(self, client):
        _create_pet(client, name="A")
        _create_pet(client, name="B", status="withdrawn")

        available = client.get("/pets/findByStatus?status=available").get_json()["data"]
        both = client.get("/pets/findByStatus?status=available,withdrawn").get_json()["data"]

        assert [p["name"] for p in available] == ["A"]
        assert sorted(p["name"] for p in both) == ["A", "B"]

    def test_find_by_status_requires_status(self, client):
        assert client.get("/pets/findByStatus").status_code == 400

    def test_catalog_lists(self, client):
        _create_pet(client)

        categories = client.get("/categories").get_json()["data"]
        tags = client.get("/tags").get_json()["data"]

        assert [c["name"] for c in categories] == ["Dogs"]
        assert [t["name"] for t in tags] == ["friendly"]


@pytest.mark.api
@pytest.mark.integration
class TestOrderEndpoints:
    def test_order_lifecycle(self, client):
        pet = _create_pet(client).get_json()["data"]
        customer = _create_customer(client)

        placed = client.post(
            "/orders", json={"customer_id": customer["id"], "pet_id": pet["id"]}
        )
        assert placed.status_code == 201
        order = placed.get_json()["data"]
        assert order["status"] == "placed"
        assert client.get(f"/pets/{pet['id']}").get_json()["data"]["status"] == "pending"

        second = client.post(
            "/orders", json={"customer_id": customer["id"], "pet_id": pet["id"]}
        )
        assert second.status_code == 409
        assert second.get_json()["error"] == "conflict"

        delivered = client.post(f"/orders/{order['id']}/fulfill")
        assert delivered.get_json()["data"]["status"] == "delivered"
        assert client.get(f"/pets/{pet['id']}").get_json()["data"]["status"] == "sold"

        cancel = client.post(f"/orders/{order['id']}/cancel")
        assert cancel.status_code == 409
        assert cancel.get_json()["error"] == "invalid_state"

        history = client.get(f"/customers/{customer['id']}/orders").get_json()["data"]
        assert [o["id"] for o in history] == [order["id"]]

    def test_order_for_missing_pet(self, client):
        customer = _create_customer(client)

        response = client.post("/orders", json={"customer_id": customer["id"], "pet_id": 42})

        assert response.status_code == 404

    def test_order_body_validation(self, client):
        response = client.post("/orders", json={"customer_id": 1})
        assert response.status_code == 400


@pytest.mark.api
@pytest.mark.integration
class TestCustomerEndpoints:
    def test_customer_crud(self, client):
        customer = _create_customer(client)

        listed = client.get("/customers").get_json()["data"]
        assert [c["id"] for c in listed] == [customer["id"]]

        assert client.delete(f"/customers/{customer['id']}").status_code == 200
        assert client.get(f"/customers/{customer['id']}").status_code == 404

    def test_customer_with_orders_cannot_be_deleted(self, client):
        pet = _create_pet(client).get_json()["data"]
        customer = _create_customer(client)
        client.post("/orders", json={"customer_id": customer["id"], "pet_id": pet["id"]})

        response = client.delete(f"/customers/{customer['id']}")

        assert response.status_code == 409
        assert response.get_json()["error"] == "invalid_state"

    def test_invalid_email(self, client):
        response = client.post("/customers", json={"name": "Ada", "email": "nope"})
        assert response.status_code == 400


@pytest.mark.api
@pytest.mark.integration
class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json()["database"] == "ok"

    def test_request_id_header(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"
