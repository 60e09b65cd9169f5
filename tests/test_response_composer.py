from logan.models import FitnessIntent
from logan.services.response_composer import (
    READY_MESSAGE,
    SIMPLE_FIELDS,
    compose_response,
    missing_fields,
)

FULL = FitnessIntent(
    fitness_level="intermediate",
    goals="muscle building",
    time_available="45",
    equipment="full gym",
    focus_areas="upper body",
    workout_frequency="4",
)


def test_ready_signal_wins_over_missing_fields():
    reply = compose_response(FitnessIntent(), "just create something now")
    assert reply == READY_MESSAGE


def test_single_missing_field_prompt_has_escape_hatch():
    intent = FULL.model_copy(update={"workout_frequency": ""})
    reply = compose_response(intent, "sounds good")
    assert "days per week" in reply
    assert "create workout now" in reply


def test_two_missing_fields_are_named_together():
    intent = FULL.model_copy(update={"equipment": "", "focus_areas": ""})
    reply = compose_response(intent, "ok")
    assert "equipment access and focus areas" in reply
    assert "create workout now" in reply


def test_all_known_gives_summary():
    reply = compose_response(FULL, "cool")
    assert "4-day split" in reply
    assert "intermediate" in reply
    assert "muscle building" in reply


def test_many_missing_asks_first_in_priority_order():
    reply = compose_response(FitnessIntent(goals="weight loss"), "hi")
    assert "fitness level" in reply
    reply = compose_response(FitnessIntent(fitness_level="beginner"), "hi")
    assert "fitness goals" in reply


def test_simple_variant_checks_four_fields():
    intent = FULL.model_copy(update={"focus_areas": "", "workout_frequency": ""})
    assert missing_fields(intent, SIMPLE_FIELDS) == []
