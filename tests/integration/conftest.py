import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from marketplace.api import cart_router, order_router, product_router, stats_router, user_router
from marketplace.api.errors import register_error_handlers

from factories import bearer

SECRET = "integration-secret"


@pytest.fixture(autouse=True)
def _jwt_secret(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", SECRET)
    monkeypatch.setenv("JWT_ALGORITHM", "HS256")


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(product_router)
    app.include_router(user_router)
    app.include_router(stats_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def customer():
    return bearer("user-001")


@pytest.fixture()
def admin():
    return bearer("admin-001", role="admin")


@pytest.fixture()
def seller():
    return bearer("seller-001")


@pytest.fixture()
def published_product(client, seller):
    response = client.post(
        "/products",
        json={
            "name": "Ikan Nila",
            "description": "Fresh tilapia",
            "price": 100,
            "stock": 10,
            "is_published": True,
        },
        headers=seller,
    )
    assert response.status_code == 201
    return response.json()["id"]
