import uuid

import httpx
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.main import app
from app.api.deps import get_database
from app.db.mongo import MealDatabase
from app.services.payment_service import StripeGateway, get_payment_gateway
from helpers import (
    ADMIN,
    BRONZE_USER,
    GOLD_USER,
    FakeStripe,
    auth_headers,
    meal_payload,
    run,
    user_document,
)


@pytest.fixture
def database():
    return MealDatabase(AsyncMongoMockClient(), f"mealDB_{uuid.uuid4().hex[:8]}")


@pytest.fixture
def seeded_database(database):
    run(database.users.insert_many([
        user_document(ADMIN, role="admin", badge="Gold"),
        user_document(GOLD_USER, badge="Gold"),
        user_document(BRONZE_USER),
    ]))
    return database


@pytest.fixture
def stripe():
    return FakeStripe()


@pytest.fixture
def gateway(stripe):
    return StripeGateway(
        secret_key="sk_test_123",
        base_url="https://api.stripe.test/v1",
        transport=httpx.MockTransport(stripe),
    )


@pytest.fixture
def client(seeded_database, gateway):
    app.dependency_overrides[get_database] = lambda: seeded_database
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def lunch_meal_id(client):
    response = client.post("/meals", json=meal_payload(), headers=auth_headers(ADMIN))
    assert response.status_code == 200
    return response.json()["insertedId"]
