import os
import tempfile

# Settings are read at import time, so the environment must be ready first.
_TMP_DIR = tempfile.mkdtemp(prefix="stock_tracker_tests_")
os.environ["SECRET_KEY"] = "test-secret-key-for-stock-tracker"
os.environ["LOG_FILE_PATH"] = os.path.join(_TMP_DIR, "app.log")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP_DIR, "default.db")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from stock_tracker.db import database  # noqa: E402
from stock_tracker.main import app  # noqa: E402

PASSWORD = "Secret1234"


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = str(tmp_path / "stock_tracker.db")
    monkeypatch.setattr(database, "DB_PATH", path)
    database.init_db()
    return path


@pytest.fixture
def client(db_path):
    with TestClient(app) as test_client:
        yield test_client


def register_and_login(client, username):
    resp = client.post(
        "/api/v1/auth/register",
        json={
            "email": f"{username}@example.com",
            "username": username,
            "password": PASSWORD,
        },
    )
    assert resp.status_code == 201, resp.text
    resp = client.post(
        "/api/v1/auth/login",
        data={"username": username, "password": PASSWORD},
    )
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client, "alice")


@pytest.fixture
def other_headers(client):
    return register_and_login(client, "bob")


def stock_payload(**overrides):
    payload = {
        "itemName": "Widget",
        "quantityReceived": 10,
        "unitPrice": 2,
        "sellingPrice": 3,
        "week": 1,
        "year": 2024,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def add_stock(client):
    def _add(headers, **overrides):
        resp = client.post("/api/v1/stocks/add", json=stock_payload(**overrides), headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _add
