import asyncio

from logan.models import FitnessIntent
from logan.services.memory_service import (
    MemoryService,
    build_memory_facts,
    memory_texts,
    parse_profile,
)


class SlowMemoryService(MemoryService):
    """응답이 timeout 보다 늦게 오는 기억 서비스."""

    async def search(self, user_id, query=""):
        await asyncio.sleep(5)
        return ["User's fitness level is advanced"]


class BrokenMemoryService(MemoryService):

    async def search(self, user_id, query=""):
        raise ConnectionError("mem0 unreachable")


class StaticMemoryService(MemoryService):

    async def search(self, user_id, query=""):
        return [
            "User's fitness level is beginner",
            "User has 45 minutes available for workouts",
            "User has access to dumbbells",
        ]


def test_recall_falls_back_to_empty_on_timeout():
    memory = SlowMemoryService(api_key="test", enabled=True, timeout=0.05)
    recalled = asyncio.run(memory.recall("user-1", "hi"))
    assert recalled == {"userMemories": [], "userProfile": {}}


def test_recall_falls_back_to_empty_on_error():
    memory = BrokenMemoryService(api_key="test", enabled=True, timeout=0.5)
    recalled = asyncio.run(memory.recall("user-1"))
    assert recalled == {"userMemories": [], "userProfile": {}}


def test_recall_builds_profile_from_memories():
    memory = StaticMemoryService(api_key="test", enabled=True, timeout=0.5)
    recalled = asyncio.run(memory.recall("user-1"))
    assert recalled["userProfile"] == {
        "fitnessLevel": "beginner",
        "timeAvailable": "45",
        "equipment": "dumbbells",
    }
    assert len(recalled["userMemories"]) == 3


def test_memory_is_disabled_without_api_key():
    memory = MemoryService(api_key="", enabled=True)
    assert memory.enabled is False
    assert asyncio.run(memory.search("user-1")) == []
    assert memory.remember("user-1", FitnessIntent(goals="weight loss")) is None


def test_facts_round_trip_through_profile_patterns():
    intent = FitnessIntent(
        fitness_level="advanced",
        goals="strength training",
        time_available="60",
        equipment="full gym",
        focus_areas="core",
        workout_frequency="5",
    )
    profile = parse_profile(build_memory_facts(intent))
    assert profile == {
        "fitnessLevel": "advanced",
        "goals": "strength training",
        "timeAvailable": "60",
        "equipment": "full gym",
        "focusAreas": "core",
        "workoutFrequency": "5",
    }


def test_memory_texts_accepts_all_response_shapes():
    assert memory_texts([{"memory": "a"}, {"text": "b"}, "c"]) == ["a", "b", "c"]
    assert memory_texts({"results": [{"memory": "a"}]}) == ["a"]
    assert memory_texts({"memories": [{"text": "b"}]}) == ["b"]
    assert memory_texts(None) == []
