import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from inventory_api.core.config import Settings
from inventory_api.main import create_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Adm1n-Passw0rd!"
SECRET_KEY = "test-secret-key"


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def item_payload(**overrides):
    payload = {
        "name": "Green Tea",
        "category": "Tea",
        "price": 4.5,
        "stock": 20,
        "description": "Loose leaf sencha",
        "supplier": "Kyoto Farms",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def settings():
    return Settings(
        _env_file=None,
        mongo_uri="mongodb://localhost:27017",
        db_name="inventory_test",
        secret_key=SECRET_KEY,
        bcrypt_rounds=4,
        environment="test",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture()
def client(settings):
    app = create_app(settings, client=AsyncMongoMockClient())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def register(client):
    def _register(email="jane@example.com", password="S3cret-pass", first_name="Jane", last_name="Doe", **extra):
        body = {"firstName": first_name, "lastName": last_name, "email": email, "password": password, **extra}
        response = client.post("/api/users/register", json=body)
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["user"], data["accessToken"]

    return _register


@pytest.fixture()
def admin_token(client):
    response = client.post("/api/users/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200, response.text
    return response.json()["data"]["accessToken"]


@pytest.fixture()
def user_token(register):
    _, token = register()
    return token
