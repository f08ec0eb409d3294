"""
Pytest configuration and shared fixtures
"""
import pytest
from fastapi.testclient import TestClient

from docqa.config import Settings
from docqa.dependencies import AppServices
from docqa.server import create_app
from fakes import FakeEmbedder, FakeLLM, FakeStore


def make_settings(**overrides) -> Settings:
    values = dict(MONGODB_URI="mongodb://localhost:27017", VOYAGE_API_KEY="test-key")
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def services(settings, store, embedder, llm):
    return AppServices.build(settings, store, embedder, llm)


@pytest.fixture
def client(services):
    with TestClient(create_app(services=services)) as client:
        yield client
