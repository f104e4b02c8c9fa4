"""HTTP contract for the auth endpoints and the access guard."""

from dataclasses import replace
from datetime import timedelta

from models.credential_store import MalformedRecord
from utils.tokens import TokenCodec


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


class TestRegisterEndpoint:

    def test_register_created(self, client):
        resp = client.post("/register", json={"name": "Alice", "email": "alice@example.com", "password": "pw123"})

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["status"] == 1
        assert body["userId"]

    def test_register_duplicate(self, client, alice):
        resp = client.post("/register", json={"email": "alice@example.com", "password": "pw123"})

        assert resp.status_code == 409
        assert resp.get_json()["message"]

    def test_register_missing_fields(self, client):
        resp = client.post("/register", json={"email": "alice@example.com"})

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["status"] == 0
        assert "password" in body["details"]

    def test_register_without_body(self, client):
        assert client.post("/register").status_code == 400


class TestLoginEndpoint:

    def test_login_returns_tokens(self, login_tokens, alice):
        assert login_tokens["accessToken"]
        assert login_tokens["refreshToken"]
        assert login_tokens["userId"] == alice.id
        assert login_tokens["role"] == "user"

    def test_bad_credentials_are_401_with_one_message(self, client, alice):
        wrong = client.post("/login", json={"email": "alice@example.com", "password": "bad"})
        unknown = client.post("/login", json={"email": "eve@example.com", "password": "pw123"})

        assert wrong.status_code == 401
        assert unknown.status_code == 401
        assert wrong.get_json()["message"] == unknown.get_json()["message"]

    def test_missing_fields_are_400(self, client):
        assert client.post("/login", json={"email": "alice@example.com"}).status_code == 400

    def test_corrupt_stored_user_is_500(self, client, manager, alice, monkeypatch):
        def corrupt(email):
            raise MalformedRecord("User.token_version must be a non-negative integer")

        monkeypatch.setattr(manager.store, "find_user_by_email", corrupt)
        resp = client.post("/login", json={"email": "alice@example.com", "password": "pw123"})

        assert resp.status_code == 500
        body = resp.get_json()
        assert body["error"] == "INTERNAL_ERROR"
        assert "token_version" not in body["message"]


class TestRefreshEndpoint:

    def test_refresh_rotates(self, client, login_tokens):
        resp = client.post("/refresh", json={"refreshToken": login_tokens["refreshToken"]})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["refreshToken"] != login_tokens["refreshToken"]
        assert body["accessToken"] != login_tokens["accessToken"]

    def test_reused_refresh_token_is_403(self, client, login_tokens):
        client.post("/refresh", json={"refreshToken": login_tokens["refreshToken"]})
        resp = client.post("/refresh", json={"refreshToken": login_tokens["refreshToken"]})

        assert resp.status_code == 403

    def test_garbage_is_403(self, client):
        assert client.post("/refresh", json={"refreshToken": "nope"}).status_code == 403

    def test_missing_token_is_400(self, client):
        assert client.post("/refresh", json={}).status_code == 400


class TestAccessGuard:

    def test_no_token_is_401(self, client):
        assert client.get("/me").status_code == 401
        assert client.get("/me", headers={"Authorization": "Token abc"}).status_code == 401

    def test_bad_token_is_403(self, client):
        assert client.get("/me", headers=bearer("not-a-token")).status_code == 403

    def test_refresh_token_is_not_an_access_token(self, client, login_tokens):
        assert client.get("/me", headers=bearer(login_tokens["refreshToken"])).status_code == 403

    def test_expired_and_invalid_tokens_share_a_message(self, app, client, alice):
        settings = app.extensions["auth_settings"]
        expired = TokenCodec(replace(settings, access_ttl=timedelta(seconds=-30))).issue(alice.id, 0)

        expired_resp = client.get("/me", headers=bearer(expired.access_token))
        invalid_resp = client.get("/me", headers=bearer("x.y.z"))

        assert expired_resp.status_code == 403
        assert expired_resp.get_json()["message"] == invalid_resp.get_json()["message"]


class TestProfileEndpoints:

    def test_me_and_profile(self, client, auth_headers, alice):
        for path in ("/me", "/profile"):
            resp = client.get(path, headers=auth_headers)
            assert resp.status_code == 200
            assert resp.get_json() == {
                "id": alice.id,
                "name": "Alice",
                "email": "alice@example.com",
                "role": "user",
                "email_verified": False,
            }

    def test_verify_email(self, client, auth_headers):
        assert client.post("/verify-email", headers=auth_headers).status_code == 200
        assert client.get("/me", headers=auth_headers).get_json()["email_verified"] is True


class TestLogoutEndpoints:

    def test_logout_twice_succeeds(self, client, login_tokens, auth_headers):
        body = {"refreshToken": login_tokens["refreshToken"]}

        assert client.post("/logout", json=body, headers=auth_headers).status_code == 200
        assert client.post("/logout", json=body, headers=auth_headers).status_code == 200
        assert client.post("/refresh", json=body).status_code == 403

    def test_logout_requires_access_token(self, client, login_tokens):
        resp = client.post("/logout", json={"refreshToken": login_tokens["refreshToken"]})
        assert resp.status_code == 401

    def test_logout_all(self, client, login_tokens, auth_headers):
        resp = client.post("/logout-all", headers=auth_headers)

        assert resp.status_code == 200
        assert client.post("/refresh", json={"refreshToken": login_tokens["refreshToken"]}).status_code == 403
        # access tokens are stateless and stay valid until they expire
        assert client.get("/me", headers=auth_headers).status_code == 200


class TestPasswordResetEndpoints:

    def test_forgot_password_never_returns_the_token(self, client, mailer, alice):
        resp = client.post("/forgot-password", json={"email": "alice@example.com"})

        assert resp.status_code == 200
        token = mailer.outbox[-1]["token"]
        assert token not in resp.get_data(as_text=True)
        assert "resetToken" not in resp.get_json()

    def test_forgot_password_answers_the_same_for_unknown_email(self, client, alice):
        known = client.post("/forgot-password", json={"email": "alice@example.com"})
        unknown = client.post("/forgot-password", json={"email": "eve@example.com"})

        assert unknown.status_code == 200
        assert known.get_json() == unknown.get_json()

    def test_reset_password(self, client, mailer, alice):
        client.post("/forgot-password", json={"email": "alice@example.com"})
        token = mailer.outbox[-1]["token"]

        resp = client.post("/reset-password", json={"resetToken": token, "newPassword": "fresh-pw"})

        assert resp.status_code == 200
        assert client.post("/login", json={"email": "alice@example.com", "password": "fresh-pw"}).status_code == 200

    def test_reset_password_bad_token(self, client):
        resp = client.post("/reset-password", json={"resetToken": "bogus", "newPassword": "fresh-pw"})
        assert resp.status_code == 400

    def test_reset_password_missing_fields(self, client):
        assert client.post("/reset-password", json={"resetToken": "bogus"}).status_code == 400


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/does-not-exist")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "NOT_FOUND"
