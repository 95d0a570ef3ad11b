import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RUN_MIGRATIONS"] = "false"
os.environ["REDIS_URL"] = ""
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from ecofreight.main import app
from ecofreight.infrastructure import cache
from ecofreight.infrastructure.db import SessionLocal, init_models, drop_models
from ecofreight.application.auth_service import AuthService
from ecofreight.application.schemas import UserCreate
from ecofreight.auth_local import create_access_token
from ecofreight.domain.ledger import get_ledger

@pytest.fixture(autouse=True)
def fresh_state():
    init_models()
    cache.local_cache.clear()
    get_ledger().clear()
    yield
    drop_models()

@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def client():
    return TestClient(app)

def make_user(role: str, email: str, full_name: str = "Test User"):
    session = SessionLocal()
    try:
        user = AuthService(session).create_user(
            UserCreate(email=email, password="secret123", full_name=full_name, role=role)
        )
        return user.id, {"Authorization": f"Bearer {create_access_token(user.id, role=role)}"}
    finally:
        session.close()

@pytest.fixture
def manager():
    return make_user("manager", "manager@example.com", "Mia Manager")

@pytest.fixture
def driver():
    return make_user("driver", "driver@example.com", "Dan Driver")

@pytest.fixture
def customer():
    return make_user("customer", "customer@example.com", "Cara Customer")

@pytest.fixture
def other_customer():
    return make_user("customer", "other@example.com", "Otto Other")

@pytest.fixture
def create_shipment(client, manager):
    """Factory creating shipments through the API as the manager."""
    _, headers = manager

    def _create(customer_id: str, **overrides):
        payload = {
            "title": "Office chairs",
            "origin": "Berlin",
            "destination": "Munich",
            "transport_type": "truck",
            "product_type": "furniture",
            "quantity": 10,
            "weight": 1000,
            "customer_id": customer_id,
        }
        payload.update(overrides)
        resp = client.post("/shipments/", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
