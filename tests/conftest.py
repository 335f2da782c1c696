import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from api.server import create_app
from config.config import Settings
from di.container import Container
from utils.errors import AuthorizationError

AUTH_KEY = "open-sesame"


class FakeMemoryStore:
    def __init__(self):
        self.docs = {}
        self._counter = 0

    def create(self, new_memory):
        self._counter += 1
        memory_id = f"mem-{self._counter}"
        self.docs[memory_id] = new_memory.to_document()
        return memory_id

    def delete(self, memory_id):
        self.docs.pop(memory_id, None)


class FakeAuthorizedIdentities:
    def __init__(self, allowed=None):
        self.allowed = set(allowed or [])

    def authorize(self, uid):
        self.allowed.add(uid)

    def is_authorized(self, uid):
        return uid in self.allowed


class FakeVerifier:
    def __init__(self, tokens):
        self.tokens = tokens

    def verify(self, token):
        if token not in self.tokens:
            raise AuthorizationError("Unauthorized: Invalid or missing identity token.")
        return self.tokens[token]


@pytest.fixture
def api_env(monkeypatch):
    monkeypatch.setenv("POST_AUTHORIZATION_KEY", AUTH_KEY)
    monkeypatch.setenv("LOCAL_APP_ID", "test-app")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:8501")


@pytest.fixture
def store():
    return FakeMemoryStore()


@pytest.fixture
def identities():
    return FakeAuthorizedIdentities(allowed={"uid-allowed"})


@pytest.fixture
def verifier():
    return FakeVerifier({"token-allowed": "uid-allowed", "token-stranger": "uid-stranger"})


@pytest.fixture
def container(api_env, store, identities, verifier):
    container = Container()
    container.settings.override(providers.Object(Settings()))
    container.memory_store_client.override(providers.Object(store))
    container.authorized_identities.override(providers.Object(identities))
    container.identity_verifier.override(providers.Object(verifier))
    yield container
    container.unwire()
    container.reset_override()


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client
