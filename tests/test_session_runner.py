import time

import pytest

from logan.models import Exercise, Workout
from logan.services.session_runner import SessionError, SessionRegistry, SessionRunner


def make_workout(**overrides):
    data = dict(
        id="w-1",
        name="Upper Body",
        date="2026-10-19",
        exercises=[
            Exercise(name="Bench Press", sets=3, reps=8, weight=135),
            Exercise(name="Push-ups", sets=2, reps=15, weight=0),
        ],
    )
    data.update(overrides)
    return Workout(**data)


def test_starting_a_session_activates_the_workout():
    runner = SessionRunner(make_workout())
    assert runner.workout.status == "active"
    assert runner.workout.started_at is not None
    assert runner.states[0].sets[0].weight == 135
    assert runner.exercise_status(0) == "pending"
    assert runner.exercise_status(1) == "pending"


def test_initial_sets_prefer_recorded_actuals():
    workout = make_workout(exercises=[
        Exercise(name="Squat", sets=3, reps=5, weight=185, actual_reps=[5, 4], actual_weight=175),
    ])
    runner = SessionRunner(workout)
    assert [s.reps for s in runner.states[0].sets] == [5, 4, 5]
    assert all(s.weight == 175 for s in runner.states[0].sets)


def test_complete_set_is_idempotent():
    runner = SessionRunner(make_workout())
    assert runner.complete_set(0, 1) is True
    before = [s.model_copy() for s in runner.states[0].sets]
    assert runner.complete_set(0, 1) is False
    assert runner.states[0].sets == before


def test_exercise_completion_is_fold_of_sets():
    runner = SessionRunner(make_workout())
    runner.complete_set(1, 0)
    assert runner.states[1].completed is False
    runner.complete_set(1, 1)
    assert runner.states[1].completed is True
    assert runner.exercise_status(1) == "done"
    assert runner.progress()["completedExercises"] == 1


def test_completed_sets_cannot_be_edited():
    runner = SessionRunner(make_workout())
    assert runner.update_set(0, 0, "reps", "10") is True
    assert runner.states[0].sets[0].reps == 10
    runner.complete_set(0, 0)
    assert runner.update_set(0, 0, "reps", 12) is False
    assert runner.states[0].sets[0].reps == 10


def test_update_set_coerces_bad_numbers_to_zero():
    runner = SessionRunner(make_workout())
    runner.update_set(0, 1, "weight", "heavy")
    assert runner.states[0].sets[1].weight == 0
    runner.update_set(0, 1, "weight", "142.5")
    assert runner.states[0].sets[1].weight == 142.5


def test_invalid_indices_raise():
    runner = SessionRunner(make_workout())
    with pytest.raises(SessionError):
        runner.complete_set(5, 0)
    with pytest.raises(SessionError):
        runner.complete_set(0, 3)
    with pytest.raises(SessionError):
        runner.update_set(0, 0, "tempo", 1)
    with pytest.raises(SessionError):
        runner.go_to(-1)


def test_progress_is_persisted_when_exercise_finishes():
    saved = []
    runner = SessionRunner(make_workout(), on_exercise_complete=lambda wid, idx, ex: saved.append((wid, idx, ex)))
    runner.update_set(1, 0, "reps", 12)
    runner.complete_set(1, 0)
    assert saved == []
    runner.complete_set(1, 1)
    assert len(saved) == 1
    workout_id, index, exercise = saved[0]
    assert (workout_id, index) == ("w-1", 1)
    assert exercise.completed is True
    assert exercise.actual_sets == 2
    assert exercise.actual_reps == [12, 15]


def test_persistence_failure_does_not_break_the_session():
    def explode(*args):
        raise RuntimeError("db down")

    runner = SessionRunner(make_workout(), on_exercise_complete=explode)
    runner.complete_set(1, 0)
    assert runner.complete_set(1, 1) is True
    assert runner.states[1].completed is True


def test_finish_workout_folds_sets_into_actuals():
    runner = SessionRunner(make_workout())
    runner.update_set(0, 0, "weight", 140)
    runner.complete_set(0, 0)
    runner.complete_set(0, 1)
    finished = runner.finish_workout()

    assert finished.status == "completed"
    assert finished.completed is True
    assert finished.completed_at is not None
    bench, pushups = finished.exercises
    assert bench.actual_sets == 2
    assert bench.actual_reps == [8, 8, 8]
    assert bench.actual_weight == 140
    assert bench.completed is False
    assert pushups.actual_sets == 0
    assert pushups.actual_weight == 0


def test_summary_counts_sets():
    runner = SessionRunner(make_workout())
    runner.complete_set(0, 0)
    summary = runner.summary()
    assert summary["completedSets"] == 1
    assert summary["totalSets"] == 5
    assert summary["completionRate"] == 20


def test_exercise_status_follows_completed_sets():
    runner = SessionRunner(make_workout())
    runner.complete_set(0, 0)
    assert runner.exercise_status(0) == "in-progress"
    runner.complete_set(0, 1)
    runner.complete_set(0, 2)
    assert runner.exercise_status(0) == "done"
    assert runner.exercise_status(1) == "pending"


def test_navigation_does_not_change_exercise_status():
    runner = SessionRunner(make_workout())
    runner.complete_set(0, 0)
    assert runner.go_to(1) == 1
    assert runner.exercise_status(0) == "in-progress"
    assert runner.exercise_status(1) == "pending"
    assert runner.go_to(0) == 0
    assert runner.exercise_status(1) == "pending"


def test_update_set_rejects_negative_and_non_finite_weight():
    runner = SessionRunner(make_workout())
    runner.update_set(0, 0, "weight", -20)
    assert runner.states[0].sets[0].weight == 0
    runner.update_set(0, 0, "weight", float("nan"))
    assert runner.states[0].sets[0].weight == 0
    runner.update_set(0, 0, "weight", "inf")
    assert runner.states[0].sets[0].weight == 0
    runner.update_set(0, 0, "reps", -5)
    assert runner.states[0].sets[0].reps == 0


def test_elapsed_time_comes_from_wall_clock():
    runner = SessionRunner(make_workout())
    runner.started_at -= 75
    summary = runner.summary()
    assert summary["elapsedSeconds"] == 75
    assert summary["totalTime"] == "1:15"


def test_registry_evicts_idle_sessions():
    registry = SessionRegistry(idle_ttl=60)
    stale = registry.add(SessionRunner(make_workout()))
    fresh = registry.add(SessionRunner(make_workout(id="w-2")))
    stale.last_active_at = time.time() - 120

    assert registry.get(stale.session_id) is None
    assert registry.get(fresh.session_id) is fresh
    assert len(registry) == 1


def test_registry_lookup_keeps_session_alive():
    registry = SessionRegistry(idle_ttl=60)
    runner = registry.add(SessionRunner(make_workout()))
    runner.last_active_at = time.time() - 50
    assert registry.get(runner.session_id) is runner
    assert runner.idle_seconds() < 5
    assert registry.remove(runner.session_id) is runner
    assert registry.get(runner.session_id) is None
