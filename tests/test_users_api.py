"""Integration tests for registration, login and the user endpoints."""

from datetime import datetime, timedelta, timezone

from conftest import ADMIN_EMAIL, SECRET_KEY, bearer

from inventory_api.core.security import TokenService
from inventory_api.models.user import Role

MISSING_ID = "64b7f0c2a1b2c3d4e5f60718"


def _assert_no_password(body):
    text = str(body)
    assert "password" not in text
    assert "$2b$" not in text


class TestRegister:
    def test_register_returns_user_and_token(self, client):
        response = client.post(
            "/api/users/register",
            json={"firstName": "Jane", "lastName": "Doe", "email": "Jane@Example.com", "password": "S3cret-pass"},
        )

        assert response.status_code == 201
        body = response.json()
        _assert_no_password(body)
        data = body["data"]
        assert data["tokenType"] == "bearer"
        assert data["accessToken"]
        assert data["user"]["email"] == "jane@example.com"
        assert data["user"]["role"] == "user"
        assert data["user"]["createdAt"]

    def test_register_cannot_choose_a_role(self, register):
        user, _ = register(role="admin")

        assert user["role"] == "user"

    def test_email_differing_only_in_case_is_a_conflict(self, client, register):
        register(email="jane@example.com")

        response = client.post(
            "/api/users/register",
            json={"firstName": "Janet", "lastName": "Doe", "email": "JANE@example.com", "password": "An0ther-pass"},
        )

        assert response.status_code == 409
        assert "email" in response.json()["message"]

    def test_reports_every_violation(self, client):
        response = client.post("/api/users/register", json={"firstName": "J", "email": "nope"})

        assert response.status_code == 400
        assert {e["field"] for e in response.json()["errors"]} == {"firstName", "lastName", "email", "password"}


class TestLogin:
    def test_login(self, client, register):
        user, _ = register()

        response = client.post("/api/users/login", json={"email": "JANE@example.com", "password": "S3cret-pass"})

        assert response.status_code == 200
        data = response.json()["data"]
        _assert_no_password(data)
        assert data["user"]["id"] == user["id"]
        me = client.get(f"/api/users/{user['id']}", headers=bearer(data["accessToken"]))
        assert me.status_code == 200

    def test_wrong_password_does_not_reveal_the_email(self, client, register):
        register()

        wrong_password = client.post("/api/users/login", json={"email": "jane@example.com", "password": "wrong-pass"})
        unknown_email = client.post("/api/users/login", json={"email": "nobody@example.com", "password": "wrong-pass"})

        assert wrong_password.status_code == 401
        assert unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()

    def test_missing_credentials(self, client):
        response = client.post("/api/users/login", json={})

        assert response.status_code == 400
        assert {e["field"] for e in response.json()["errors"]} == {"email", "password"}


class TestTokens:
    def test_expired_token(self, client, register):
        user, _ = register()
        expired = TokenService(SECRET_KEY, expires_delta=timedelta(minutes=5)).issue_token(
            user["id"], Role.USER, now=datetime.now(timezone.utc) - timedelta(hours=1)
        )

        response = client.get(f"/api/users/{user['id']}", headers=bearer(expired))

        assert response.status_code == 401
        assert response.json()["message"] == "Token has expired"

    def test_token_signed_with_another_key(self, client, register):
        user, _ = register()
        forged = TokenService("not-the-server-key").issue_token(user["id"], Role.ADMIN)

        response = client.get("/api/users", headers=bearer(forged))

        assert response.status_code == 401

    def test_token_of_a_deleted_user(self, client, register):
        user, token = register()
        assert client.delete(f"/api/users/{user['id']}", headers=bearer(token)).status_code == 204

        response = client.get(f"/api/users/{user['id']}", headers=bearer(token))

        assert response.status_code == 401
        assert response.json()["message"] == "User no longer exists"

    def test_missing_token(self, client, register):
        user, _ = register()

        response = client.get(f"/api/users/{user['id']}")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"


class TestListUsers:
    def test_admin_lists_users(self, client, register, admin_token):
        register()

        response = client.get("/api/users", headers=bearer(admin_token))

        assert response.status_code == 200
        body = response.json()
        _assert_no_password(body)
        assert body["count"] == 2
        assert {u["email"] for u in body["data"]} == {"jane@example.com", ADMIN_EMAIL}

    def test_non_admin_is_forbidden(self, client, user_token):
        assert client.get("/api/users", headers=bearer(user_token)).status_code == 403


class TestOwnership:
    def test_user_cannot_touch_another_user(self, client, register):
        alice, alice_token = register(email="alice@example.com", first_name="Alice")
        bob, _ = register(email="bob@example.com", first_name="Bob")
        headers = bearer(alice_token)

        assert client.get(f"/api/users/{bob['id']}", headers=headers).status_code == 403
        assert client.put(f"/api/users/{bob['id']}", json={"firstName": "Robert"}, headers=headers).status_code == 403
        assert client.delete(f"/api/users/{bob['id']}", headers=headers).status_code == 403

    def test_admin_can_touch_any_user(self, client, register, admin_token):
        bob, _ = register(email="bob@example.com", first_name="Bob")
        headers = bearer(admin_token)

        fetched = client.get(f"/api/users/{bob['id']}", headers=headers)
        updated = client.put(f"/api/users/{bob['id']}", json={"firstName": "Robert"}, headers=headers)
        deleted = client.delete(f"/api/users/{bob['id']}", headers=headers)

        assert fetched.status_code == 200
        _assert_no_password(fetched.json())
        assert updated.status_code == 200
        assert updated.json()["data"]["firstName"] == "Robert"
        _assert_no_password(updated.json())
        assert deleted.status_code == 204


class TestUpdateUser:
    def test_user_updates_own_profile(self, client, register):
        user, token = register()

        response = client.put(f"/api/users/{user['id']}", json={"lastName": "Smith"}, headers=bearer(token))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["lastName"] == "Smith"
        assert data["firstName"] == "Jane"

    def test_non_admin_role_change_is_stripped(self, client, register):
        user, token = register()

        response = client.put(f"/api/users/{user['id']}", json={"role": "admin"}, headers=bearer(token))

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "user"
        assert client.get("/api/users", headers=bearer(token)).status_code == 403

    def test_admin_changes_role(self, client, register, admin_token):
        user, token = register()

        response = client.put(f"/api/users/{user['id']}", json={"role": "admin"}, headers=bearer(admin_token))

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "admin"
        # the stored role is authoritative, not the one in the older token
        assert client.get("/api/users", headers=bearer(token)).status_code == 200

    def test_password_change(self, client, register):
        user, token = register()

        response = client.put(f"/api/users/{user['id']}", json={"password": "N3w-password"}, headers=bearer(token))

        assert response.status_code == 200
        _assert_no_password(response.json())
        old = client.post("/api/users/login", json={"email": "jane@example.com", "password": "S3cret-pass"})
        new = client.post("/api/users/login", json={"email": "jane@example.com", "password": "N3w-password"})
        assert old.status_code == 401
        assert new.status_code == 200

    def test_merged_result_is_validated(self, client, register):
        user, token = register()

        response = client.put(
            f"/api/users/{user['id']}",
            json={"firstName": "J", "email": "broken"},
            headers=bearer(token),
        )

        assert response.status_code == 400
        assert {e["field"] for e in response.json()["errors"]} == {"firstName", "email"}

    def test_missing_user(self, client, admin_token):
        response = client.put(f"/api/users/{MISSING_ID}", json={"firstName": "Ghost"}, headers=bearer(admin_token))

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"


class TestCreateAndDeleteUser:
    def test_admin_creates_an_admin(self, client, admin_token):
        response = client.post(
            "/api/users",
            json={"firstName": "Second", "lastName": "Admin", "email": "ops@example.com", "password": "0ps-password", "role": "admin"},
            headers=bearer(admin_token),
        )

        assert response.status_code == 201
        _assert_no_password(response.json())
        assert response.json()["data"]["role"] == "admin"

    def test_non_admin_cannot_create_users(self, client, user_token):
        response = client.post(
            "/api/users",
            json={"firstName": "Eve", "lastName": "Doe", "email": "eve@example.com", "password": "3ve-password"},
            headers=bearer(user_token),
        )

        assert response.status_code == 403

    def test_delete_twice(self, client, register, admin_token):
        user, _ = register()

        first = client.delete(f"/api/users/{user['id']}", headers=bearer(admin_token))
        second = client.delete(f"/api/users/{user['id']}", headers=bearer(admin_token))

        assert first.status_code == 204
        assert second.status_code == 404
