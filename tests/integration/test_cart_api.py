"""Integration tests for Cart API endpoints via TestClient."""

from factories import bearer


def _add(client, headers, product_id, quantity, **extra):
    return client.post("/cart", json={"product_id": product_id, "quantity": quantity, **extra}, headers=headers)


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.get("/cart")
        assert response.status_code == 401
        assert response.json()["error"] == "AuthenticationError"

    def test_badly_signed_token(self, client):
        response = client.get("/cart", headers=bearer("user-001", secret="wrong"))
        assert response.status_code == 401

    def test_unconfigured_secret_rejects_every_token(self, client, monkeypatch):
        monkeypatch.delenv("JWT_SECRET")
        forged = bearer("attacker", role="admin", secret="secret")

        response = client.get("/users/customers", headers=forged)
        assert response.status_code == 401

    def test_empty_secret_rejects_every_token(self, client, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "")
        response = client.get("/cart", headers=bearer("user-001"))
        assert response.status_code == 401


class TestCartEndpoints:
    def test_get_creates_empty_cart(self, client, customer):
        response = client.get("/cart", headers=customer)
        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == "user-001"
        assert body["items"] == []

    def test_add_same_line_accumulates(self, client, customer, published_product):
        _add(client, customer, published_product, 2)
        response = _add(client, customer, published_product, 3)
        assert response.status_code == 200
        [item] = response.json()["items"]
        assert item["quantity"] == 5
        assert item["size"] == "default"

    def test_stock_boundary(self, client, customer, published_product):
        assert _add(client, customer, published_product, 10).status_code == 200
        response = _add(client, customer, published_product, 1)
        assert response.status_code == 400
        assert response.json() == {"message": "Quantity exceeds available stock", "error": "StockExceededError"}

    def test_zero_quantity_rejected(self, client, customer, published_product):
        response = _add(client, customer, published_product, 0)
        assert response.status_code == 400
        assert "errors" in response.json()

    def test_unknown_product(self, client, customer):
        response = _add(client, customer, "no-such-product", 1)
        assert response.status_code == 404

    def test_update_sets_quantity(self, client, customer, published_product):
        _add(client, customer, published_product, 2)
        response = client.put("/cart", json={"product_id": published_product, "quantity": 4}, headers=customer)
        assert response.status_code == 200
        assert response.json()["items"][0]["quantity"] == 4

    def test_update_without_cart(self, client, customer, published_product):
        response = client.put("/cart", json={"product_id": published_product, "quantity": 1}, headers=customer)
        assert response.status_code == 404

    def test_stale_version_conflict(self, client, customer, published_product):
        _add(client, customer, published_product, 1)
        response = _add(client, customer, published_product, 1, expected_version=0)
        assert response.status_code == 409
        assert response.json()["error"] == "StaleCartError"

    def test_remove_item(self, client, customer, published_product):
        _add(client, customer, published_product, 1)
        response = client.delete(f"/cart/{published_product}", headers=customer)
        assert response.status_code == 200
        assert response.json()["items"] == []


class TestNotFoundSemantics:
    def test_clear_without_cart_succeeds(self, client, customer):
        response = client.delete("/cart", headers=customer)
        assert response.status_code == 200
        assert response.json() == {"message": "Cart cleared"}

    def test_remove_without_cart_is_not_found(self, client, customer):
        response = client.delete("/cart/prod-001", headers=customer)
        assert response.status_code == 404
        assert response.json()["message"] == "Cart not found"

    def test_remove_missing_item_is_not_found(self, client, customer):
        client.get("/cart", headers=customer)
        response = client.delete("/cart/prod-001", headers=customer)
        assert response.status_code == 404
        assert response.json()["message"] == "Item not found in cart"
