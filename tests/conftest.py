import pytest
from fastapi.testclient import TestClient

from users_api.app import create_app
from users_api.user_store import UserStore


@pytest.fixture(name="store")
def store_fixture():
    return UserStore()


@pytest.fixture(name="client")
def client_fixture(store: UserStore):
    with TestClient(create_app(store)) as client:
        yield client
