from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from logan.errors import InvalidTransition

WorkoutStatus = Literal["proposed", "active", "completed", "skipped"]

# 허용되는 상태 전이 (앞으로만 진행)
ALLOWED_TRANSITIONS = {
    "proposed": {"active", "skipped"},
    "active": {"completed", "skipped"},
    "completed": set(),
    "skipped": set(),
}


class FitnessIntent(BaseModel):
    """대화에서 누적되는 사용자 피트니스 정보 (슬롯)."""
    model_config = ConfigDict(populate_by_name=True)

    fitness_level: str = Field("", alias="fitnessLevel")
    goals: str = ""
    time_available: str = Field("", alias="timeAvailable")
    equipment: str = ""
    focus_areas: str = Field("", alias="focusAreas")
    workout_frequency: str = Field("", alias="workoutFrequency")
    has_enough_info: bool = Field(False, alias="hasEnoughInfo")


class Exercise(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: str
    sets: int = Field(3, ge=1)
    reps: int = Field(10, ge=1)
    weight: float = Field(0, ge=0)
    notes: str = ""
    rest_seconds: int = Field(60, alias="restSeconds")
    completed: bool = False
    actual_sets: Optional[int] = Field(None, alias="actualSets")
    actual_reps: Optional[List[int]] = Field(None, alias="actualReps")
    actual_weight: Optional[float] = Field(None, alias="actualWeight")


class Workout(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: str
    date: str
    duration: int = 30
    notes: str = ""
    description: str = ""
    exercises: List[Exercise]
    status: WorkoutStatus = "proposed"
    completed: bool = False
    started_at: Optional[str] = Field(None, alias="startedAt")
    completed_at: Optional[str] = Field(None, alias="completedAt")
    user_id: Optional[str] = Field(None, alias="userId")
    chat_id: Optional[str] = Field(None, alias="chatId")


class WorkoutUpdate(BaseModel):
    """PUT /workouts/{id} 부분 수정용."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    date: Optional[str] = None
    duration: Optional[int] = None
    notes: Optional[str] = None
    description: Optional[str] = None
    exercises: Optional[List[Exercise]] = None
    status: Optional[WorkoutStatus] = None


class PlanDay(BaseModel):
    day: str
    focus: str = ""
    workout: Workout


class WeeklyPlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    notes: str = ""
    weekly_plan: List[PlanDay] = Field(..., alias="weeklyPlan")
    date: str
    fitness_level: str = Field("", alias="fitnessLevel")
    goals: str = ""
    workout_frequency: str = Field("", alias="workoutFrequency")
    time_available: str = Field("", alias="timeAvailable")
    equipment: str = ""
    focus_areas: str = Field("", alias="focusAreas")


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


def today_string() -> str:
    return date.today().isoformat()


def now_string() -> str:
    return datetime.now().isoformat(timespec="seconds")


def advance_status(workout: Workout, new_status: str) -> Workout:
    """
    상태를 앞으로만 전이시킨 새 Workout을 반환합니다.
    active는 startedAt, completed는 completedAt을 기록합니다.
    """
    if new_status == workout.status:
        return workout
    if new_status not in ALLOWED_TRANSITIONS.get(workout.status, set()):
        raise InvalidTransition(f"Cannot change workout status from {workout.status} to {new_status}")

    update = {"status": new_status}
    if new_status == "active":
        update["started_at"] = now_string()
    elif new_status == "completed":
        update["completed_at"] = workout.completed_at or now_string()
        update["completed"] = True
    return workout.model_copy(update=update)
