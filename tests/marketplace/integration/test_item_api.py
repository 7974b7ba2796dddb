"""Integration tests for the item and stock endpoints via TestClient."""


class TestItemAPI:
    def test_get_item_shows_stock(self, client, listed):
        item_id = listed(title="Lamp", price=20.0, stock=4)
        response = client.get(f"/items/{item_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Lamp"
        assert body["stock"] == 4
        assert body["rating"] is None

    def test_unknown_item_is_not_found(self, client):
        response = client.get("/items/no-such-item")
        assert response.status_code == 404
        assert response.json()["status"] == "not_found"

    def test_listing_requires_session(self, client):
        assert client.post("/items", json={"title": "Lamp", "price": 1.0}).status_code == 401

    def test_edit_by_stranger_is_forbidden(self, client, listed, buyer_auth):
        item_id = listed()
        _, headers = buyer_auth
        response = client.put(f"/items/{item_id}", json={"price": 1.0}, headers=headers)
        assert response.status_code == 403
        assert response.json()["status"] == "forbidden"

    def test_edit_by_owner(self, client, listed, seller_auth):
        item_id = listed(price=20.0)
        _, headers = seller_auth
        assert client.put(f"/items/{item_id}", json={"price": 15.0}, headers=headers).status_code == 200
        assert client.get(f"/items/{item_id}").json()["price"] == 15.0

    def test_delist(self, client, listed, seller_auth):
        item_id = listed(stock=3)
        _, headers = seller_auth
        assert client.delete(f"/items/{item_id}", headers=headers).status_code == 200
        assert client.get(f"/items/{item_id}").status_code == 404

    def test_search_suggestions(self, client, listed):
        listed(title="Desk lamp")
        listed(title="Chair")
        response = client.get("/items/search_suggestions", params={"q": "lamp"})
        assert response.status_code == 200
        assert response.json() == {"titles": ["Desk lamp"]}


class TestStockAPI:
    def test_stranger_cannot_set_stock(self, client, listed, buyer_auth):
        item_id = listed(stock=2)
        _, headers = buyer_auth
        response = client.put(f"/items/{item_id}/stock", json={"quantity": 99}, headers=headers)
        assert response.status_code == 403
        assert client.get(f"/items/{item_id}").json()["stock"] == 2

    def test_negative_stock_is_rejected(self, client, listed, seller_auth):
        item_id = listed()
        _, headers = seller_auth
        response = client.put(f"/items/{item_id}/stock", json={"quantity": -1}, headers=headers)
        assert response.status_code == 422


class TestRatingAPI:
    def test_rate_item(self, client, listed, buyer_auth):
        item_id = listed()
        _, headers = buyer_auth
        response = client.post(f"/items/{item_id}/ratings", json={"rating": 4}, headers=headers)
        assert response.status_code == 200
        assert response.json() == {"rating": 4.0}

    def test_repeat_rating_is_conflict(self, client, listed, buyer_auth):
        item_id = listed()
        _, headers = buyer_auth
        client.post(f"/items/{item_id}/ratings", json={"rating": 4}, headers=headers)
        response = client.post(f"/items/{item_id}/ratings", json={"rating": 2}, headers=headers)
        assert response.status_code == 409

    def test_seller_cannot_rate_own_item(self, client, listed, seller_auth):
        item_id = listed()
        _, headers = seller_auth
        response = client.post(f"/items/{item_id}/ratings", json={"rating": 5}, headers=headers)
        assert response.status_code == 403
