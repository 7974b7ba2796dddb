import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from marketplace.api import cart_router, item_router, order_router, register_error_handlers, user_router


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(user_router)
    app.include_router(item_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def register(client):
    """Sign a user up through the API and return (user_id, auth headers)."""

    def _register(username):
        response = client.post(
            "/users/signup",
            json={"username": username, "email": f"{username}@example.com", "password": "s3cret-pass"},
        )
        assert response.status_code == 201
        body = response.json()
        return body["user_id"], {"session_id": body["session_id"]}

    return _register


@pytest.fixture()
def seller_auth(register):
    return register("seller")


@pytest.fixture()
def buyer_auth(register):
    return register("buyer")


@pytest.fixture()
def listed(client, seller_auth):
    """List an item as the seller, optionally with stock; returns the item id."""

    def _listed(title="Lamp", price=20.0, stock=None):
        _, headers = seller_auth
        response = client.post("/items", json={"title": title, "price": price}, headers=headers)
        assert response.status_code == 201
        item_id = response.json()["item_id"]
        if stock is not None:
            assert client.put(f"/items/{item_id}/stock", json={"quantity": stock}, headers=headers).status_code == 200
        return item_id

    return _listed


@pytest.fixture()
def address(client, buyer_auth):
    _, headers = buyer_auth
    response = client.post(
        "/users/me/addresses",
        json={"street": "1 Market Street", "city": "Springfield", "postal_code": "62701", "country": "US"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["address_id"]
