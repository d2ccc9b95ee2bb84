from foodsewa.services.user_service import decode_token, issue_token


class TestAuth:
    def test_bearer_token(self, client, customer):
        resp = client.get("/api/auth/me", headers=customer)

        assert resp.status_code == 200
        assert resp.json()["data"]["user"] == {"id": 1, "name": "Customer", "email": "c1@test", "role": "user"}

    def test_cookie_token(self, client):
        client.cookies.set("token", issue_token(2))

        resp = client.get("/api/auth/me")

        assert resp.status_code == 200
        assert resp.json()["data"]["user"]["role"] == "restaurant"

    def test_garbage_token(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert resp.status_code == 401

    def test_expired_token(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {issue_token(1, ttl_seconds=-10)}"})

        assert resp.status_code == 401

    def test_deactivated_user(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {issue_token(5)}"})

        assert resp.status_code == 401
        assert resp.json()["message"] == "Unauthorized"

    def test_unknown_user(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {issue_token(99)}"})

        assert resp.status_code == 401

    def test_token_round_trip(self):
        assert decode_token(issue_token(42)) == 42


class TestEnvelope:
    def test_unknown_route(self, client):
        resp = client.get("/api/nowhere")

        assert resp.status_code == 404
        assert resp.json()["success"] is False

    def test_health(self, client):
        resp = client.get("/api/health")

        assert resp.status_code == 200
