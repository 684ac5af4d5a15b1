"""Tests for the /auth HTTP routes against the fully wired app."""

from datetime import timedelta

from utils.timezone import now_utc


def _wrong(code: str) -> str:
    return "000000" if code != "000000" else "111111"


class TestRequestCode:

    def test_signup(self, unauthed_client, account_db):
        response = unauthed_client.post(
            "/auth/request-code", json={"email": "new@x.com", "name": "A", "country": "B"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == {"success": True, "message": "Verification code sent to your email"}
        assert account_db.get_account_by_email("new@x.com") is not None

    def test_signup_existing_is_conflict(self, unauthed_client, account_db):
        account_db.add("taken@x.com")

        response = unauthed_client.post(
            "/auth/request-code", json={"email": "taken@x.com", "name": "A", "country": "B"}
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"

    def test_login_unknown_is_not_found(self, unauthed_client):
        response = unauthed_client.post("/auth/request-code", json={"email": "ghost@x.com"})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_invalid_email_is_validation_error(self, unauthed_client):
        response = unauthed_client.post("/auth/request-code", json={"email": "nope"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_delivery_failure_is_502(self, unauthed_client, account_db, email_client):
        from clients.email_client import EmailDeliveryError

        account_db.add("owner@x.com")
        email_client.fail_with = EmailDeliveryError("provider down")

        response = unauthed_client.post("/auth/request-code", json={"email": "owner@x.com"})

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "EMAIL_DELIVERY_FAILED"

    def test_rate_limited_has_retry_after(self, unauthed_client, account_db):
        account_db.add("owner@x.com")

        for _ in range(5):
            unauthed_client.post("/auth/request-code", json={"email": "owner@x.com"})
        response = unauthed_client.post("/auth/request-code", json={"email": "owner@x.com"})

        assert response.status_code == 429
        assert response.json()["error"]["code"] == "RATE_LIMITED"
        assert response.headers["Retry-After"] == "900"


class TestFullLoginFlow:

    def test_signup_verify_session_logout(self, unauthed_client, email_client):
        http = unauthed_client

        http.post("/auth/request-code", json={"email": "new@x.com", "name": "A", "country": "B"})
        code = email_client.last_code_for("new@x.com")

        wrong = http.post("/auth/verify-code", json={"email": "new@x.com", "code": _wrong(code)})
        assert wrong.status_code == 400
        assert wrong.json()["error"]["code"] == "BAD_REQUEST"

        verified = http.post("/auth/verify-code", json={"email": "new@x.com", "code": code})
        assert verified.status_code == 200
        data = verified.json()["data"]
        assert data["success"] is True
        assert data["sessionToken"]
        assert data["user"]["emailVerified"] is True
        assert "session-token" in verified.headers["set-cookie"]

        session = http.get("/auth/session").json()["data"]
        assert session["user"]["email"] == "new@x.com"

        me = http.get("/auth/me")
        assert me.status_code == 200
        assert me.json()["data"] == {
            "id": session["user"]["id"], "email": "new@x.com", "name": "A", "country": "B",
        }

        logout = http.post("/auth/logout")
        assert logout.json()["data"] == {"success": True}

        assert http.get("/auth/session").json()["data"] == {"user": None}
        assert http.get("/auth/me").status_code == 401

    def test_bearer_token_works_without_cookie(self, unauthed_client, email_client, app):
        from fastapi.testclient import TestClient

        unauthed_client.post("/auth/request-code", json={"email": "new@x.com", "name": "A", "country": "B"})
        code = email_client.last_code_for("new@x.com")
        token = unauthed_client.post(
            "/auth/verify-code", json={"email": "new@x.com", "code": code}
        ).json()["data"]["sessionToken"]

        fresh = TestClient(app)
        response = fresh.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "new@x.com"

    def test_expired_code_is_bad_request(self, unauthed_client, email_client, monkeypatch):
        unauthed_client.post("/auth/request-code", json={"email": "new@x.com", "name": "A", "country": "B"})
        code = email_client.last_code_for("new@x.com")
        later = now_utc() + timedelta(minutes=11)
        monkeypatch.setattr("auth.service.now_utc", lambda: later)

        response = unauthed_client.post("/auth/verify-code", json={"email": "new@x.com", "code": code})

        assert response.status_code == 400

    def test_short_code_is_validation_error(self, unauthed_client):
        response = unauthed_client.post("/auth/verify-code", json={"email": "new@x.com", "code": "123"})

        assert response.status_code == 422


class TestGetSession:

    def test_no_cookie_returns_null_user(self, unauthed_client):
        response = unauthed_client.get("/auth/session")

        assert response.status_code == 200
        assert response.json()["data"] == {"user": None}

    def test_garbage_cookie_returns_null_user(self, unauthed_client):
        unauthed_client.cookies.set("session-token", "garbage")

        response = unauthed_client.get("/auth/session")

        assert response.status_code == 200
        assert response.json()["data"] == {"user": None}

    def test_deleted_account_clears_cookie(self, client, account_db, test_user_id):
        del account_db.accounts[test_user_id]

        response = client.get("/auth/session")

        assert response.json()["data"] == {"user": None}
        assert "Max-Age=0" in response.headers["set-cookie"]


class TestLogout:

    def test_logout_without_session_succeeds(self, unauthed_client):
        response = unauthed_client.post("/auth/logout")

        assert response.status_code == 200
        assert response.json()["data"] == {"success": True}


class TestMe:

    def test_requires_session(self, unauthed_client):
        assert unauthed_client.get("/auth/me").status_code == 401

    def test_profile(self, client):
        body = client.get("/auth/me").json()
        assert body["data"]["email"] == "owner@example.com"
