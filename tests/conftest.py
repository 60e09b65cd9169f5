import pytest
from fastapi.testclient import TestClient

from logan.dependencies import (
    get_chat_repository,
    get_conversation_store,
    get_llm,
    get_memory_service,
    get_profile_repository,
    get_session_registry,
    get_workout_repository,
)
from logan.services.inmemory_repository import (
    InMemoryChatRepository,
    InMemoryProfileRepository,
    InMemoryWorkoutRepository,
)
from logan.services.memory_service import MemoryService
from logan.services.session_runner import SessionRegistry
from logan.services.session_store import ConversationStore
from main_server import app


class FakeLLM:
    """정해진 응답을 순서대로 돌려주는 LLM 대역."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    async def complete(self, system_prompt, messages, temperature=0.7, max_tokens=1000):
        self.calls.append({
            "system_prompt": system_prompt,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.error is not None:
            raise self.error
        return self.responses.pop(0) if self.responses else "Let's get moving!"


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.expiry = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value
        self.expiry[key] = ex

    def delete(self, key):
        self.data.pop(key, None)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def workout_repository():
    return InMemoryWorkoutRepository()


@pytest.fixture
def profile_repository():
    return InMemoryProfileRepository()


@pytest.fixture
def chat_repository():
    return InMemoryChatRepository()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(fake_llm, workout_repository, profile_repository, chat_repository, fake_redis):
    registry = SessionRegistry()
    store = ConversationStore(client=fake_redis)
    memory = MemoryService(api_key="", enabled=False)

    app.dependency_overrides[get_llm] = lambda: fake_llm
    app.dependency_overrides[get_workout_repository] = lambda: workout_repository
    app.dependency_overrides[get_profile_repository] = lambda: profile_repository
    app.dependency_overrides[get_chat_repository] = lambda: chat_repository
    app.dependency_overrides[get_conversation_store] = lambda: store
    app.dependency_overrides[get_memory_service] = lambda: memory
    app.dependency_overrides[get_session_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()
