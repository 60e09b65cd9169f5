from typing import Any, Dict, Literal, Union

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from logan.dependencies import get_session_registry, get_workout_repository
from logan.errors import MISSING_KEY_MESSAGE, ConfigError, UpstreamError
from logan.services.session_runner import SessionError, SessionRunner
from logan.services.voice_commands import build_session_update, handle_voice_event, request_realtime_session

router = APIRouter()


class StartSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    workout_id: str = Field(..., alias="workoutId")


class SetUpdateRequest(BaseModel):
    field: Literal["reps", "weight"]
    value: Union[int, float, str, None] = None


class NavigateRequest(BaseModel):
    index: int


def _runner_or_404(registry, session_id: str) -> SessionRunner:
    runner = registry.get(session_id)
    if runner is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return runner


@router.post("/sessions", status_code=201)
def start_session(request: StartSessionRequest, repository=Depends(get_workout_repository),
                  registry=Depends(get_session_registry)):
    workout = repository.get_workout(request.workout_id)
    if workout is None:
        raise HTTPException(status_code=404, detail="Workout not found")
    if workout.status not in ("proposed", "active"):
        raise HTTPException(status_code=409, detail=f"Workout is already {workout.status}")

    runner = SessionRunner(workout, on_exercise_complete=repository.update_exercise_progress)
    if workout.status != runner.workout.status:
        try:
            repository.update_workout(runner.workout)
        except Exception as e:
            print(f"⚠️ [SessionRouter] 운동 상태(active) 저장 실패: {e}")
    registry.add(runner)
    print(f"[SessionRouter] 세션 시작: {runner.session_id} ({workout.name})")
    return runner.snapshot()


@router.get("/sessions/{session_id}")
def get_session(session_id: str, registry=Depends(get_session_registry)):
    return _runner_or_404(registry, session_id).snapshot()


@router.put("/sessions/{session_id}/exercises/{exercise_index}/sets/{set_index}")
def update_set(session_id: str, exercise_index: int, set_index: int, request: SetUpdateRequest,
               registry=Depends(get_session_registry)):
    runner = _runner_or_404(registry, session_id)
    try:
        updated = runner.update_set(exercise_index, set_index, request.field, request.value)
    except SessionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not updated:
        raise HTTPException(status_code=409, detail="Set is already completed")
    return runner.snapshot()


@router.post("/sessions/{session_id}/exercises/{exercise_index}/sets/{set_index}/complete")
def complete_set(session_id: str, exercise_index: int, set_index: int,
                 registry=Depends(get_session_registry)):
    runner = _runner_or_404(registry, session_id)
    try:
        newly_completed = runner.complete_set(exercise_index, set_index)
    except SessionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"completed": newly_completed, "session": runner.snapshot()}


@router.put("/sessions/{session_id}/current")
def go_to_exercise(session_id: str, request: NavigateRequest, registry=Depends(get_session_registry)):
    runner = _runner_or_404(registry, session_id)
    try:
        runner.go_to(request.index)
    except SessionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return runner.snapshot()


@router.post("/sessions/{session_id}/voice-events")
def voice_event(session_id: str, event: Dict[str, Any] = Body(...), registry=Depends(get_session_registry)):
    """실시간 음성 채널의 이벤트를 받아 되돌려 보낼 이벤트를 돌려줍니다."""
    runner = _runner_or_404(registry, session_id)
    return {"events": handle_voice_event(runner, event)}


@router.get("/sessions/{session_id}/voice-instructions")
def voice_instructions(session_id: str, registry=Depends(get_session_registry)):
    return build_session_update(_runner_or_404(registry, session_id))


@router.post("/sessions/{session_id}/finish")
def finish_session(session_id: str, repository=Depends(get_workout_repository),
                   registry=Depends(get_session_registry)):
    runner = _runner_or_404(registry, session_id)
    summary = runner.summary()
    finished = runner.finish_workout()
    try:
        finished = repository.update_workout(finished)
    except Exception as e:
        print(f"⚠️ [SessionRouter] 완료된 운동 저장 실패: {e}")
    registry.remove(session_id)
    print(f"[SessionRouter] 세션 종료: {session_id} ({summary['completionRate']}% 완료)")
    return {"workout": finished, "summary": summary}


@router.delete("/sessions/{session_id}")
def close_session(session_id: str, registry=Depends(get_session_registry)):
    """저장 없이 세션을 정리합니다 (화면 이탈 등)."""
    if registry.remove(session_id) is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True}


@router.post("/realtime-session")
def create_realtime_session():
    try:
        return request_realtime_session()
    except ConfigError:
        raise HTTPException(status_code=500, detail=MISSING_KEY_MESSAGE)
    except UpstreamError as e:
        raise HTTPException(status_code=500, detail=e.user_message("Failed to start voice session. Please try again."))
