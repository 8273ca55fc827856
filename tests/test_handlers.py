"""Store failures inside the handler pipeline."""

import asyncio

from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from conftest import bearer, item_payload
from inventory_api.core.errors import InternalError
from inventory_api.core.result import Err

OUTAGE = "10.0.0.5:27017: timed out"


def _fail_with_outage(*args, **kwargs):
    async def _fail():
        raise ServerSelectionTimeoutError(OUTAGE)

    return _fail()


def test_store_failure_becomes_an_internal_error(client, monkeypatch):
    handler = client.app.state.inventory
    monkeypatch.setattr(handler.repository, "find_all", _fail_with_outage)

    result = asyncio.run(handler.list(None))

    assert isinstance(result, Err)
    assert isinstance(result.error, InternalError)
    assert result.error.status_code == 500


def test_store_failure_does_not_leak_detail(client, monkeypatch):
    repository = client.app.state.inventory.repository
    monkeypatch.setattr(repository, "find_all", _fail_with_outage)

    listed = client.get("/api/inventory")

    assert listed.status_code == 500
    assert listed.json() == {
        "success": False,
        "status": "error",
        "statusCode": 500,
        "message": "Internal Server Error",
    }
    assert "10.0.0.5" not in listed.text


def test_store_failure_on_write(client, monkeypatch, user_token):
    monkeypatch.setattr(client.app.state.inventory.repository, "insert", _fail_with_outage)

    response = client.post("/api/inventory", json=item_payload(), headers=bearer(user_token))

    assert response.status_code == 500
    assert "10.0.0.5" not in response.text


def test_duplicate_field_reads_the_key_pattern(client):
    repository = client.app.state.users.repository
    error = DuplicateKeyError("E11000 duplicate key", 11000, {"keyPattern": {"email": 1}, "keyValue": {"email": "a@b.c"}})

    assert repository.duplicate_field(error) == "email"
    assert repository.duplicate_field(DuplicateKeyError("E11000 duplicate key", 11000, {})) == "email"
