import json

from logan.errors import ParseError
from logan.models import Exercise, WeeklyPlan, Workout
from logan.services.workout_parser import (
    extract_json_block,
    parse_weekly_plan_response,
    parse_workout_response,
    to_float,
    to_int,
)


def test_strips_prose_and_code_fences():
    raw = 'Here is your workout:\n```json\n{"name": "Leg Day", "exercises": [{"name": "Squat", "sets": 4, "reps": 8, "weight": 95}]}\n```\nEnjoy!'
    workout = parse_workout_response(raw, "45")
    assert isinstance(workout, Workout)
    assert workout.name == "Leg Day"
    assert workout.duration == 45
    assert workout.status == "proposed"
    assert workout.completed is False
    assert workout.exercises[0] == Exercise(name="Squat", sets=4, reps=8, weight=95)


def test_repairs_quoted_units():
    raw = '{"name":"X","exercises":[{"name":"Plank","sets":3,"reps":"10 reps","weight":0},{"name":"Wall Sit","sets":2,"reps":"30 seconds"}]}'
    workout = parse_workout_response(raw)
    assert isinstance(workout, Workout)
    assert workout.exercises[0].reps == 10
    assert workout.exercises[1].reps == 30


def test_empty_exercise_gets_defaults():
    workout = parse_workout_response('{"name":"Mystery","exercises":[{}]}')
    assert workout.exercises == [
        Exercise(name="Unknown Exercise", sets=3, reps=10, weight=0, notes="")
    ]


def test_lenient_numeric_coercion():
    raw = '{"name":"Mixed","exercises":[{"name":"Row","sets":"4","reps":"12-15","weight":"22.5 lbs"},{"name":"Dip","sets":0,"reps":-3,"weight":-10}]}'
    workout = parse_workout_response(raw)
    row, dip = workout.exercises
    assert (row.sets, row.reps, row.weight) == (4, 12, 22.5)
    assert (dip.sets, dip.reps, dip.weight) == (3, 10, 0)


def test_metadata_defaults():
    workout = parse_workout_response('{"name":"Quick","exercises":[]}')
    assert workout.id.startswith("workout-")
    assert len(workout.date) == 10
    assert workout.duration == 30


def test_malformed_json_keeps_raw_and_cleaned_text():
    raw = "Sure! {name: Leg Day, exercises: [}"
    result = parse_workout_response(raw)
    assert isinstance(result, ParseError)
    assert result.kind == "MalformedResponse"
    assert result.raw_text == raw
    assert result.cleaned_text.startswith("{")


def test_no_json_at_all_is_malformed():
    result = parse_workout_response("I cannot help with that.")
    assert isinstance(result, ParseError)
    assert result.kind == "MalformedResponse"


def test_missing_name_or_exercises_is_invalid_structure():
    for raw in ['{"exercises": []}', '{"name": "A"}', '{"name": "", "exercises": []}',
                '{"name": "A", "exercises": "push-ups"}']:
        result = parse_workout_response(raw)
        assert isinstance(result, ParseError)
        assert result.kind == "InvalidStructure"


def test_valid_workout_survives_a_round_trip():
    original = Workout(
        id="workout-1",
        name="Push Day",
        date="2026-03-02",
        duration=40,
        notes="Rest 90 seconds",
        exercises=[
            Exercise(name="Bench Press", sets=4, reps=6, weight=135, notes="Pause at the chest"),
            Exercise(name="Push-ups", sets=3, reps=15, weight=0),
        ],
    )
    raw = json.dumps(original.model_dump(by_alias=True))
    assert parse_workout_response(raw, 40) == original


def test_weekly_plan_normalizes_each_day():
    raw = json.dumps({
        "name": "Three Day Split",
        "description": "Push / pull / legs",
        "weeklyPlan": [
            {"day": "Monday", "focus": "Push", "workout": {"name": "Push", "exercises": [{"name": "Press", "reps": "8 reps"}]}},
            {"day": "Wednesday", "focus": "Pull", "workout": {"name": "Pull", "exercises": [{}]}},
        ],
    })
    params = {"fitnessLevel": "beginner", "goals": "strength training", "workoutFrequency": "3",
              "timeAvailable": "45", "equipment": "full gym", "focusAreas": "full body"}
    plan = parse_weekly_plan_response(raw, params)
    assert isinstance(plan, WeeklyPlan)
    # 요청은 3일이지만 2일만 와도 거절하지 않음
    assert len(plan.weekly_plan) == 2
    assert plan.weekly_plan[0].workout.exercises[0].reps == 8
    assert plan.weekly_plan[1].workout.exercises[0].name == "Unknown Exercise"
    assert plan.weekly_plan[0].workout.duration == 45
    assert plan.fitness_level == "beginner"
    assert plan.workout_frequency == "3"


def test_weekly_plan_without_days_is_invalid():
    result = parse_weekly_plan_response('{"name": "Empty", "weeklyPlan": []}', {})
    assert isinstance(result, ParseError)
    assert result.kind == "InvalidStructure"


def test_helpers():
    assert extract_json_block("  noise {\"a\": {\"b\": 1}} tail ") == '{"a": {"b": 1}}'
    assert to_int("7 sets", 3) == 7
    assert to_int(None, 3) == 3
    assert to_int(True, 3) == 3
    assert to_float("abc") == 0.0
    assert to_float(12) == 12.0
