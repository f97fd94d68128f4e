import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from todo_api.db import MongoRepository, MongoStore
from todo_api.main import create_app
from todo_api.repositories import InMemoryRepository
from todo_api.settings import Settings


@pytest.fixture
def memory_settings() -> Settings:
    return Settings(persistence_backend="memory", log_level="WARNING")


@pytest.fixture
def client(memory_settings):
    # Entering the client runs the lifespan, which builds a fresh in-memory repository
    with TestClient(create_app(memory_settings)) as c:
        yield c


def _mongo_repository() -> MongoRepository:
    store = MongoStore(database="todo_test", client=AsyncMongoMockClient())
    return MongoRepository(store)


@pytest.fixture(params=["memory", "mongo"])
def repo(request):
    if request.param == "memory":
        return InMemoryRepository()
    return _mongo_repository()
