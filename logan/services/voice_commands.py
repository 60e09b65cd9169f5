import json
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel

from logan import config
from logan.errors import ConfigError, UpstreamError
from logan.prompts import get_voice_coach_prompt
from logan.services.session_runner import SessionRunner

COMPLETE_SET_TOOL = {
    "type": "function",
    "name": "complete_set",
    "description": "Mark a set of the current exercise as completed when the user says they finished it.",
    "parameters": {
        "type": "object",
        "properties": {
            "setNumber": {
                "type": "integer",
                "description": "The 1-based number of the set the user just completed.",
            }
        },
        "required": ["setNumber"],
    },
}


class CompleteSetCommand(BaseModel):
    call_id: str = ""
    set_number: int


def decode_function_call(item: Dict[str, Any]) -> Optional[CompleteSetCommand]:
    """실시간 이벤트의 function_call 항목에서 complete_set 명령만 꺼냅니다."""
    if not isinstance(item, dict) or item.get("type") != "function_call":
        return None
    if item.get("name") != "complete_set":
        return None
    arguments = item.get("arguments") or "{}"
    try:
        args = json.loads(arguments) if isinstance(arguments, str) else dict(arguments)
    except (json.JSONDecodeError, TypeError, ValueError):
        print(f"[VoiceCoach] function_call 인자 파싱 실패: {arguments}")
        return None
    set_number = args.get("setNumber")
    if isinstance(set_number, bool) or not isinstance(set_number, (int, float, str)):
        return None
    try:
        set_number = int(set_number)
    except (ValueError, OverflowError):
        return None
    return CompleteSetCommand(call_id=str(item.get("call_id") or ""), set_number=set_number)


def apply_complete_set(runner: SessionRunner, command: CompleteSetCommand) -> Dict[str, Any]:
    exercise_index = runner.current_index
    total_sets = len(runner.states[exercise_index].sets) if runner.states else 0
    n = command.set_number
    if not 1 <= n <= total_sets:
        return {"success": False, "message": f"Set {n} doesn't exist. This exercise has {total_sets} sets."}
    if not runner.complete_set(exercise_index, n - 1):
        return {"success": False, "message": f"Set {n} is already completed! Good job on that one."}
    return {"success": True, "message": f"Great job! Set {n} of {total_sets} completed successfully!"}


def handle_voice_event(runner: SessionRunner, event: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    실시간 채널에서 받은 이벤트를 처리하고, 되돌려 보낼 이벤트 목록을 반환합니다.
    complete_set 호출이 아니면 빈 목록.
    """
    if event.get("type") != "response.output_item.done":
        return []
    command = decode_function_call(event.get("item") or {})
    if command is None:
        return []

    result = apply_complete_set(runner, command)
    print(f"[VoiceCoach] complete_set({command.set_number}) → {result['message']}")
    return [
        {
            "type": "conversation.item.create",
            "item": {
                "type": "function_call_output",
                "call_id": command.call_id,
                "output": json.dumps(result),
            },
        },
        {"type": "response.create"},
    ]


def build_session_update(runner: SessionRunner) -> Dict[str, Any]:
    index = runner.current_index
    exercise = runner.workout.exercises[index] if runner.workout.exercises else None
    instructions = get_voice_coach_prompt(
        workout_name=runner.workout.name,
        exercise=exercise.model_dump() if exercise else {},
        exercise_number=index + 1,
        total_exercises=len(runner.workout.exercises),
        completed_sets=runner.states[index].completed_sets if runner.states else 0,
    )
    return {
        "type": "session.update",
        "session": {
            "instructions": instructions,
            "tools": [COMPLETE_SET_TOOL],
            "tool_choice": "auto",
        },
    }


def request_realtime_session() -> Dict[str, Any]:
    """
    OpenAI realtime 세션을 만들고 임시 클라이언트 키를 돌려받습니다.
    브라우저는 이 키로 WebRTC 연결을 엽니다.
    """
    if not config.openai_key_configured():
        raise ConfigError()
    try:
        response = requests.post(
            config.OPENAI_REALTIME_SESSIONS_URL,
            headers={
                "Authorization": f"Bearer {config.openai_api_key()}",
                "Content-Type": "application/json",
            },
            json={"model": config.OPENAI_REALTIME_MODEL, "voice": config.OPENAI_REALTIME_VOICE},
            timeout=10,
        )
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        print(f"🚨 realtime 세션 생성 오류: {e}")
        raise UpstreamError.from_exception(e) from e

    data = response.json()
    return {
        "clientSecret": (data.get("client_secret") or {}).get("value"),
        "expiresAt": (data.get("client_secret") or {}).get("expires_at"),
        "model": data.get("model", config.OPENAI_REALTIME_MODEL),
    }
