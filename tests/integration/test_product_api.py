"""Integration tests for Product API endpoints via TestClient."""

from factories import bearer


class TestProductEndpoints:
    def test_create_product(self, client, seller):
        response = client.post(
            "/products",
            json={
                "name": "Udang Vaname",
                "description": "Shrimp",
                "price": 80000,
                "discount": 25,
                "sizes": ["500g", "1kg"],
            },
            headers=seller,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["discounted_price"] == 60000
        assert body["sizes"] == ["500g", "1kg"]
        assert body["seller_id"] == "seller-001"
        assert body["is_published"] is False

    def test_invalid_discount(self, client, seller):
        response = client.post(
            "/products",
            json={"name": "X", "description": "Y", "price": 1, "discount": 150},
            headers=seller,
        )
        assert response.status_code == 400

    def test_listing_hides_unpublished_from_public(self, client, seller, admin, published_product):
        client.post("/products", json={"name": "Draft", "description": "Y", "price": 1}, headers=seller)

        assert [p["id"] for p in client.get("/products").json()] == [published_product]
        assert len(client.get("/products", headers=admin).json()) == 2

    def test_get_product(self, client, published_product):
        response = client.get(f"/products/{published_product}")
        assert response.status_code == 200
        assert response.json()["stock"] == 10

    def test_get_missing_product(self, client):
        response = client.get("/products/no-such-product")
        assert response.status_code == 404
        assert response.json()["error"] == "ProductNotFoundError"

    def test_update_by_other_customer_forbidden(self, client, published_product):
        response = client.put(f"/products/{published_product}", json={"price": 1}, headers=bearer("user-002"))
        assert response.status_code == 403

    def test_update_by_admin(self, client, admin, published_product):
        response = client.put(f"/products/{published_product}", json={"price": 150}, headers=admin)
        assert response.status_code == 200
        assert response.json()["price"] == 150

    def test_unpublish(self, client, seller, published_product):
        response = client.put(f"/products/{published_product}/publish", json={"is_published": False}, headers=seller)
        assert response.json()["is_published"] is False
        assert client.get("/products").json() == []

    def test_delete(self, client, seller, published_product):
        response = client.delete(f"/products/{published_product}", headers=seller)
        assert response.status_code == 200
        assert client.get(f"/products/{published_product}").status_code == 404


class TestStockEndpoints:
    def test_adjust_and_read_history(self, client, seller, published_product):
        response = client.post(
            f"/products/{published_product}/stock",
            json={"change_type": "penambahan", "quantity_change": 5, "note": "Restock"},
            headers=seller,
        )
        assert response.status_code == 200
        assert response.json()["stock"] == 15

        history = client.get(f"/products/{published_product}/stock-history", headers=seller).json()
        assert [h["change_type"] for h in history] == ["penambahan", "penambahan"]
        assert history[0]["stock_after_change"] == 15

    def test_negative_result_rejected(self, client, seller, published_product):
        response = client.post(
            f"/products/{published_product}/stock",
            json={"change_type": "koreksi", "quantity_change": -11},
            headers=seller,
        )
        assert response.status_code == 400

    def test_history_restricted_to_seller_and_admin(self, client, customer, published_product):
        response = client.get(f"/products/{published_product}/stock-history", headers=customer)
        assert response.status_code == 403
