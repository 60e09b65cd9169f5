from datetime import date

import pytest

from logan.models import Exercise, FitnessIntent, Workout
from logan.services import postgres_repository
from logan.services.base_repository import profile_from_intent, profile_to_intent
from logan.services.inmemory_repository import (
    InMemoryChatRepository,
    InMemoryProfileRepository,
    InMemoryWorkoutRepository,
)
from logan.services.stats import workout_stats


def make_workout(name, day, status="proposed"):
    return Workout(name=name, date=day, status=status, exercises=[Exercise(name="Plank", sets=1, reps=30)])


def test_profile_mapping_uses_storage_values():
    fields = profile_from_intent({
        "goals": "cardio fitness",
        "equipment": "full gym",
        "time_available": "abc",
        "workout_frequency": "4",
    })
    assert fields == {
        "primary_goals": ["endurance"],
        "available_equipment": ["gym"],
        "preferred_duration_minutes": 30,
        "workout_frequency_per_week": 4,
    }


def test_profile_upsert_only_fills_in():
    profiles = InMemoryProfileRepository()
    profiles.upsert_from_intent("u-1", {"fitness_level": "beginner"})
    profiles.upsert_from_intent("u-1", {"goals": "weight loss"})
    profile = profiles.get_profile("u-1")
    assert profile["fitness_level"] == "beginner"
    assert profile["primary_goals"] == ["weight_loss"]
    assert profiles.upsert_from_intent("u-1", {}) is None


def test_stored_profile_prefills_intent():
    intent = profile_to_intent({
        "fitness_level": "intermediate",
        "primary_goals": ["muscle_building"],
        "preferred_duration_minutes": 45,
        "available_equipment": ["dumbbells"],
        "focus_areas": ["upper body"],
        "workout_frequency_per_week": 4,
    })
    assert intent == FitnessIntent(
        fitness_level="intermediate",
        goals="muscle building",
        time_available="45",
        equipment="dumbbells",
        focus_areas="upper body",
        workout_frequency="4",
    )


def test_chat_turns_are_stored_in_order():
    chats = InMemoryChatRepository()
    chat_id = chats.save_turn("u-1", "hi", "Hey! Ready to train?")
    assert chats.save_turn("u-1", "yes", "Great") == chat_id
    messages = chats.get_chat_messages(chat_id)
    assert [m["sender"] for m in messages] == ["user", "logan", "user", "logan"]
    assert {m["message_type"] for m in messages} == {"text"}


def test_workouts_are_listed_by_date_and_user():
    workouts = InMemoryWorkoutRepository()
    workouts.create_workout(make_workout("B", "2026-10-20"), user_id="u-1")
    workouts.create_workout(make_workout("A", "2026-10-18"), user_id="u-1")
    workouts.create_workout(make_workout("C", "2026-10-19"), user_id="u-2")
    assert [w.name for w in workouts.list_workouts("u-1")] == ["A", "B"]
    assert len(workouts.list_workouts()) == 3


def test_dashboard_stats():
    stats = workout_stats([
        make_workout("A", "2026-10-01", "completed"),
        make_workout("B", "2026-10-15", "proposed"),
        make_workout("C", "2026-09-30", "completed"),
        make_workout("D", "2026-10-17", "skipped"),
    ], today=date(2026, 10, 19))
    assert stats["totalWorkouts"] == 4
    assert stats["completedWorkouts"] == 2
    assert stats["completionRate"] == 50
    assert stats["thisMonth"] == 3
    assert stats["thisMonthCompleted"] == 1


def test_dashboard_stats_empty():
    assert workout_stats([])["totalWorkouts"] == 0


def test_generated_workout_is_linked_to_active_chat():
    chats = InMemoryChatRepository()
    workout = make_workout("Leg Day", "2026-10-19").model_copy(update={"id": "w-9"})
    chat_id = chats.save_turn("u-1", "make me a workout", "On it!")
    assert chats.record_generated_workout("u-1", workout) == chat_id
    assert chats.get_or_create_active_chat("u-1")["workout_id"] == "w-9"
    last = chats.get_chat_messages(chat_id)[-1]
    assert last["message_type"] == "workout_generated"
    assert "Leg Day" in last["content"]


def test_postgres_repository_treats_non_uuid_ids_as_missing(monkeypatch):
    def no_database():
        raise AssertionError("non-UUID ids must not reach the database")

    monkeypatch.setattr(postgres_repository, "db_cursor", no_database)
    workouts = postgres_repository.PostgresWorkoutRepository()
    assert workouts.get_workout("abc") is None
    assert workouts.get_workout("workout-1729300000000") is None
    assert workouts.delete_workout("abc") is False
    with pytest.raises(KeyError):
        workouts.update_workout(make_workout("A", "2026-10-19").model_copy(update={"id": "abc"}))


def test_is_uuid():
    assert postgres_repository.is_uuid("6f1c2a9e-5b7d-4c1e-9a3f-2d8e7b6c5a41")
    assert not postgres_repository.is_uuid("workout-1729300000000")
    assert not postgres_repository.is_uuid(None)
