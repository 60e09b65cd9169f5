"""FastAPI Depends 로 주입되는 공용 인스턴스. 테스트에서는 dependency_overrides 로 교체합니다."""
from functools import lru_cache

from logan import config
from logan.services.inmemory_repository import (
    InMemoryChatRepository,
    InMemoryProfileRepository,
    InMemoryWorkoutRepository,
)
from logan.services.llm_client import LoganLLM
from logan.services.memory_service import MemoryService
from logan.services.postgres_repository import (
    PostgresChatRepository,
    PostgresProfileRepository,
    PostgresWorkoutRepository,
)
from logan.services.session_runner import SessionRegistry
from logan.services.session_store import ConversationStore


@lru_cache()
def get_workout_repository():
    if config.DATABASE_URL:
        return PostgresWorkoutRepository()
    print("[Dependencies] DATABASE_URL 이 없어 메모리 저장소를 사용합니다.")
    return InMemoryWorkoutRepository()


@lru_cache()
def get_profile_repository():
    return PostgresProfileRepository() if config.DATABASE_URL else InMemoryProfileRepository()


@lru_cache()
def get_chat_repository():
    return PostgresChatRepository() if config.DATABASE_URL else InMemoryChatRepository()


@lru_cache()
def get_llm():
    return LoganLLM()


@lru_cache()
def get_memory_service():
    return MemoryService()


@lru_cache()
def get_conversation_store():
    return ConversationStore()


@lru_cache()
def get_session_registry():
    return SessionRegistry()
