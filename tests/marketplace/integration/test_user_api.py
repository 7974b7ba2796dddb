"""Integration tests for the user and session endpoints via TestClient."""


class TestSignUpAPI:
    def test_sign_up_returns_session(self, client):
        response = client.post(
            "/users/signup",
            json={"username": "jane", "email": "jane@example.com", "password": "s3cret-pass"},
        )
        assert response.status_code == 201
        assert {"user_id", "session_id"} <= response.json().keys()

    def test_duplicate_username_is_conflict(self, client, register):
        register("jane")
        response = client.post(
            "/users/signup",
            json={"username": "jane", "email": "other@example.com", "password": "s3cret-pass"},
        )
        assert response.status_code == 409
        assert response.json()["status"] == "conflict"

    def test_short_password_is_bad_request(self, client):
        response = client.post(
            "/users/signup",
            json={"username": "jane", "email": "jane@example.com", "password": "short"},
        )
        assert response.status_code == 400


class TestSessionAPI:
    def test_log_in(self, client, register):
        user_id, _ = register("jane")
        response = client.post("/users/login", json={"username": "jane", "password": "s3cret-pass"})
        assert response.status_code == 200
        assert response.json()["session_id"]

    def test_wrong_password_is_unauthorized(self, client, register):
        register("jane")
        response = client.post("/users/login", json={"username": "jane", "password": "nope-nope"})
        assert response.status_code == 401
        assert response.json() == {"status": "unauthorized", "error": "Invalid username or password"}

    def test_log_out_invalidates_token(self, client, register):
        _, headers = register("jane")
        assert client.post("/users/logout", headers=headers).status_code == 200
        assert client.get("/cart", headers=headers).status_code == 401

    def test_missing_session_is_unauthorized(self, client):
        response = client.get("/cart")
        assert response.status_code == 401
        assert response.json()["status"] == "unauthorized"

    def test_bogus_session_is_unauthorized(self, client):
        assert client.get("/cart", headers={"session_id": "bogus"}).status_code == 401


class TestProfileAPI:
    def test_public_profile_counts_items(self, client, seller_auth, listed):
        listed(title="One")
        listed(title="Two")
        response = client.get("/users/seller")
        assert response.status_code == 200
        body = response.json()
        assert body["username"] == "seller"
        assert body["email"] == "seller@example.com"
        assert body["item_count"] == 2

    def test_unknown_profile_is_not_found(self, client):
        response = client.get("/users/nobody")
        assert response.status_code == 404
        assert response.json()["status"] == "not_found"

    def test_add_address_requires_session(self, client):
        response = client.post(
            "/users/me/addresses",
            json={"street": "1 Elm", "city": "Springfield", "postal_code": "1", "country": "US"},
        )
        assert response.status_code == 401
