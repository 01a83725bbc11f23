import pytest
from fastapi.testclient import TestClient

from finance_tracker.core.security import create_access_token
from finance_tracker.db import get_storage
from finance_tracker.db.memory import MemoryStorage
from finance_tracker.main import app


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    token = create_access_token(data={"sub": "test-user"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def food_id(storage):
    return storage.get_category_by_name("Food & Dining").id
