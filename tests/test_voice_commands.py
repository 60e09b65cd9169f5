import json

from logan.models import Exercise, Workout
from logan.services.session_runner import SessionRunner
from logan.services.voice_commands import (
    build_session_update,
    decode_function_call,
    handle_voice_event,
)


def make_runner():
    workout = Workout(
        id="w-voice",
        name="Leg Day",
        date="2026-10-19",
        exercises=[Exercise(name="Goblet Squat", sets=3, reps=10, weight=35)],
    )
    return SessionRunner(workout)


def function_call_event(arguments, name="complete_set"):
    return {
        "type": "response.output_item.done",
        "item": {"type": "function_call", "name": name, "call_id": "call_1", "arguments": arguments},
    }


def test_decode_complete_set_call():
    command = decode_function_call({"type": "function_call", "name": "complete_set",
                                    "call_id": "abc", "arguments": '{"setNumber": 2}'})
    assert command.set_number == 2
    assert command.call_id == "abc"


def test_decode_ignores_other_items():
    assert decode_function_call({"type": "message"}) is None
    assert decode_function_call({"type": "function_call", "name": "skip_exercise", "arguments": "{}"}) is None
    assert decode_function_call({"type": "function_call", "name": "complete_set", "arguments": "{oops"}) is None


def test_voice_completes_set_and_acknowledges():
    runner = make_runner()
    events = handle_voice_event(runner, function_call_event('{"setNumber": 1}'))

    assert runner.states[0].sets[0].completed is True
    assert events[0]["type"] == "conversation.item.create"
    output = json.loads(events[0]["item"]["output"])
    assert output == {"success": True, "message": "Great job! Set 1 of 3 completed successfully!"}
    assert events[0]["item"]["call_id"] == "call_1"
    assert events[1] == {"type": "response.create"}


def test_voice_repeat_is_rejected_politely():
    runner = make_runner()
    handle_voice_event(runner, function_call_event('{"setNumber": 2}'))
    events = handle_voice_event(runner, function_call_event('{"setNumber": 2}'))
    output = json.loads(events[0]["item"]["output"])
    assert output["success"] is False
    assert "already completed" in output["message"]


def test_voice_out_of_range_set():
    runner = make_runner()
    events = handle_voice_event(runner, function_call_event('{"setNumber": 7}'))
    output = json.loads(events[0]["item"]["output"])
    assert output["success"] is False
    assert not any(s.completed for s in runner.states[0].sets)


def test_unrelated_events_produce_nothing():
    runner = make_runner()
    assert handle_voice_event(runner, {"type": "response.audio.delta"}) == []


def test_session_update_carries_tool_and_instructions():
    runner = make_runner()
    runner.complete_set(0, 0)
    event = build_session_update(runner)
    assert event["type"] == "session.update"
    tool = event["session"]["tools"][0]
    assert tool["name"] == "complete_set"
    assert tool["parameters"]["required"] == ["setNumber"]
    assert "Goblet Squat" in event["session"]["instructions"]
    assert "Sets completed: 1 of 3" in event["session"]["instructions"]
