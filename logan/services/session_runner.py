import time
import uuid
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from logan import config
from logan.models import Exercise, Workout, advance_status, now_string
from logan.services.workout_parser import LEADING_INT, to_float
from logan.utils.background import fire_and_forget


class SessionError(ValueError):
    """잘못된 운동/세트 인덱스 등 세션 조작 오류."""


class SetState(BaseModel):
    reps: int
    weight: float
    completed: bool = False


class ExerciseState(BaseModel):
    sets: List[SetState]

    @property
    def completed(self) -> bool:
        # 세트 완료 여부의 AND (별도로 저장하지 않음)
        return all(s.completed for s in self.sets)

    @property
    def completed_sets(self) -> int:
        return sum(1 for s in self.sets if s.completed)


def _coerce_number(field: str, value: Any):
    """세트 입력값 변환. 숫자가 아니거나 음수/무한대면 0."""
    if field == "weight":
        return to_float(value, 0.0)
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = value
    else:
        match = LEADING_INT.match(str(value or ""))
        number = match.group(1) if match else 0
    try:
        return max(int(number), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def initial_sets(exercise: Exercise) -> List[SetState]:
    actual_reps = exercise.actual_reps or []
    weight = exercise.actual_weight or exercise.weight or 0
    return [
        SetState(
            reps=actual_reps[i] if i < len(actual_reps) and actual_reps[i] else exercise.reps,
            weight=weight,
        )
        for i in range(exercise.sets)
    ]


class SessionRunner:
    """
    진행 중인 운동 하나의 세트 단위 상태 머신.

    세트는 pending → completed 로만 바뀌고, 운동의 완료 여부는 세트 완료의 AND 입니다.
    운동 하나가 모두 끝나면 on_exercise_complete 콜백을 fire-and-forget 으로 호출합니다.
    """

    def __init__(self, workout: Workout,
                 on_exercise_complete: Optional[Callable[[str, int, Exercise], Any]] = None,
                 session_id: Optional[str] = None):
        self.session_id = session_id or str(uuid.uuid4())
        self.workout = advance_status(workout, "active") if workout.status == "proposed" else workout
        self.states = [ExerciseState(sets=initial_sets(ex)) for ex in self.workout.exercises]
        self.current_index = 0
        self.started_at = time.time()
        self.last_active_at = self.started_at
        self.on_exercise_complete = on_exercise_complete

    # --- 조회 ---
    def _state(self, exercise_index: int) -> ExerciseState:
        if not 0 <= exercise_index < len(self.states):
            raise SessionError(f"Exercise index {exercise_index} is out of range")
        return self.states[exercise_index]

    def _set(self, exercise_index: int, set_index: int) -> SetState:
        state = self._state(exercise_index)
        if not 0 <= set_index < len(state.sets):
            raise SessionError(f"Set index {set_index} is out of range")
        return state.sets[set_index]

    def exercise_status(self, exercise_index: int) -> str:
        # 완료된 세트 수로만 결정 (현재 보고 있는 운동 위치와 무관)
        state = self._state(exercise_index)
        if state.completed:
            return "done"
        if state.completed_sets > 0:
            return "in-progress"
        return "pending"

    def elapsed_seconds(self) -> int:
        return int(time.time() - self.started_at)

    def progress(self) -> Dict[str, Any]:
        total = len(self.states)
        done = sum(1 for s in self.states if s.completed)
        return {
            "completedExercises": done,
            "totalExercises": total,
            "progressPercent": round(done / total * 100) if total else 0,
        }

    # --- 조작 ---
    def go_to(self, exercise_index: int) -> int:
        self._state(exercise_index)
        self.current_index = exercise_index
        return self.current_index

    def update_set(self, exercise_index: int, set_index: int, field: str, value: Any) -> bool:
        """완료되지 않은 세트의 reps/weight 를 수정합니다. 완료된 세트면 False."""
        if field not in ("reps", "weight"):
            raise SessionError(f"Unknown set field: {field}")
        target = self._set(exercise_index, set_index)
        if target.completed:
            return False
        setattr(target, field, _coerce_number(field, value))
        return True

    def complete_set(self, exercise_index: int, set_index: int) -> bool:
        """세트를 완료 처리합니다. 이미 완료된 세트면 아무것도 하지 않고 False (멱등)."""
        target = self._set(exercise_index, set_index)
        if target.completed:
            return False
        target.completed = True

        state = self.states[exercise_index]
        if state.completed:
            print(f"[SessionRunner] 운동 {exercise_index + 1} 모든 세트 완료")
            self._persist_progress(exercise_index)
        return True

    def _exercise_result(self, exercise_index: int) -> Exercise:
        exercise = self.workout.exercises[exercise_index]
        state = self.states[exercise_index]
        return exercise.model_copy(update={
            "completed": state.completed,
            "actual_sets": state.completed_sets,
            "actual_reps": [s.reps for s in state.sets],
            "actual_weight": (state.sets[0].weight if state.sets else 0) or exercise.weight or 0,
        })

    def _persist_progress(self, exercise_index: int) -> None:
        if self.on_exercise_complete is None:
            return
        fire_and_forget(
            self.on_exercise_complete,
            self.workout.id,
            exercise_index,
            self._exercise_result(exercise_index),
            label="exercise-progress",
        )

    def finish_workout(self) -> Workout:
        """사용자가 종료를 누르면 세트 결과를 운동별 실제 기록으로 접어 완료된 Workout을 만듭니다."""
        exercises = [self._exercise_result(i) for i in range(len(self.states))]
        finished = self.workout.model_copy(update={"exercises": exercises})
        if finished.status != "completed":
            finished = advance_status(finished, "completed")
        finished = finished.model_copy(update={"completed_at": finished.completed_at or now_string()})
        self.workout = finished
        return finished

    def summary(self) -> Dict[str, Any]:
        total_sets = sum(len(s.sets) for s in self.states)
        completed_sets = sum(s.completed_sets for s in self.states)
        elapsed = self.elapsed_seconds()
        return {
            **self.progress(),
            "completedSets": completed_sets,
            "totalSets": total_sets,
            "completionRate": round(completed_sets / total_sets * 100) if total_sets else 0,
            "elapsedSeconds": elapsed,
            "totalTime": f"{elapsed // 60}:{elapsed % 60:02d}",
        }

    def snapshot(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "workoutId": self.workout.id,
            "workoutName": self.workout.name,
            "currentExercise": self.current_index,
            "exercises": [
                {
                    "name": ex.name,
                    "status": self.exercise_status(i),
                    "sets": [s.model_dump() for s in self.states[i].sets],
                }
                for i, ex in enumerate(self.workout.exercises)
            ],
            **self.summary(),
        }

    def touch(self) -> None:
        self.last_active_at = time.time()

    def idle_seconds(self) -> float:
        return time.time() - self.last_active_at


class SessionRegistry:
    """
    프로세스 내 활성 세션 보관소 (워커 간 공유되지 않음).

    finish/DELETE 없이 버려진 세션은 idle_ttl 초 동안 조회가 없으면 add/get 시점에 정리됩니다.
    """

    def __init__(self, idle_ttl: float = config.SESSION_IDLE_TTL_SECONDS):
        self.idle_ttl = idle_ttl
        self._sessions: Dict[str, SessionRunner] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def evict_idle(self) -> List[str]:
        expired = [sid for sid, runner in self._sessions.items() if runner.idle_seconds() > self.idle_ttl]
        for sid in expired:
            self._sessions.pop(sid, None)
            print(f"[SessionRegistry] 유휴 세션 정리: {sid}")
        return expired

    def add(self, runner: SessionRunner) -> SessionRunner:
        self.evict_idle()
        runner.touch()
        self._sessions[runner.session_id] = runner
        return runner

    def get(self, session_id: str) -> Optional[SessionRunner]:
        self.evict_idle()
        runner = self._sessions.get(session_id)
        if runner is not None:
            runner.touch()
        return runner

    def remove(self, session_id: str) -> Optional[SessionRunner]:
        return self._sessions.pop(session_id, None)
