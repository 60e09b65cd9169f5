from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from logan.models import Exercise, FitnessIntent, Workout

# 대화 슬롯 값 → 저장용 enum 값
GOAL_MAPPING = {
    "weight loss": "weight_loss",
    "muscle building": "muscle_building",
    "strength training": "strength",
    "cardio fitness": "endurance",
    "general fitness": "general_fitness",
}

EQUIPMENT_MAPPING = {
    "bodyweight only": "bodyweight",
    "full gym": "gym",
    "dumbbells": "dumbbells",
    "resistance bands": "resistance_bands",
}

PROFILE_FIELDS = [
    "fitness_level",
    "primary_goals",
    "preferred_duration_minutes",
    "available_equipment",
    "focus_areas",
    "workout_frequency_per_week",
]

# messages.sender
SENDER_USER = "user"
SENDER_LOGAN = "logan"


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _first(values: Any) -> str:
    if isinstance(values, (list, tuple)):
        return values[0] if values else ""
    return values or ""


def profile_from_intent(changes: Dict[str, str]) -> Dict[str, Any]:
    """바뀐 슬롯만 user_profiles 컬럼 값으로 변환합니다."""
    profile: Dict[str, Any] = {}
    if changes.get("fitness_level"):
        profile["fitness_level"] = changes["fitness_level"]
    if changes.get("goals"):
        profile["primary_goals"] = [GOAL_MAPPING.get(changes["goals"], "general_fitness")]
    if changes.get("time_available"):
        profile["preferred_duration_minutes"] = _to_int(changes["time_available"], 30)
    if changes.get("equipment"):
        profile["available_equipment"] = [EQUIPMENT_MAPPING.get(changes["equipment"], "bodyweight")]
    if changes.get("focus_areas"):
        profile["focus_areas"] = [changes["focus_areas"]]
    if changes.get("workout_frequency"):
        profile["workout_frequency_per_week"] = _to_int(changes["workout_frequency"], 3)
    return profile


def profile_to_intent(profile: Optional[Dict[str, Any]]) -> FitnessIntent:
    """저장된 프로필로 대화 시작 시점의 슬롯을 채웁니다."""
    if not profile:
        return FitnessIntent()
    goals = {v: k for k, v in GOAL_MAPPING.items()}.get(_first(profile.get("primary_goals")), "")
    equipment = {v: k for k, v in EQUIPMENT_MAPPING.items()}.get(_first(profile.get("available_equipment")), "")
    time_value = profile.get("preferred_duration_minutes")
    frequency = profile.get("workout_frequency_per_week")
    return FitnessIntent(
        fitness_level=profile.get("fitness_level") or "",
        goals=goals,
        time_available=str(time_value) if time_value else "",
        equipment=equipment,
        focus_areas=_first(profile.get("focus_areas")),
        workout_frequency=str(frequency) if frequency else "",
    )


class BaseWorkoutRepository(ABC):
    """
    Abstract base class for workout storage.
    """

    @abstractmethod
    def list_workouts(self, user_id: Optional[str] = None) -> List[Workout]:
        pass

    @abstractmethod
    def get_workout(self, workout_id: str) -> Optional[Workout]:
        pass

    @abstractmethod
    def create_workout(self, workout: Workout, user_id: Optional[str] = None,
                       chat_id: Optional[str] = None) -> Workout:
        pass

    @abstractmethod
    def update_workout(self, workout: Workout) -> Workout:
        pass

    @abstractmethod
    def delete_workout(self, workout_id: str) -> bool:
        pass

    @abstractmethod
    def update_exercise_progress(self, workout_id: str, exercise_index: int, exercise: Exercise) -> None:
        pass


class BaseProfileRepository(ABC):
    """
    Abstract base class for user profile storage.
    """

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def upsert_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    def reset_profile(self, user_id: str) -> None:
        pass

    def upsert_from_intent(self, user_id: str, changes: Dict[str, str]) -> Optional[Dict[str, Any]]:
        fields = profile_from_intent(changes)
        if not fields:
            return None
        print(f"[ProfileRepository] {user_id} 프로필 갱신: {fields}")
        return self.upsert_profile(user_id, fields)


class BaseChatRepository(ABC):
    """
    Abstract base class for chat and message storage.
    """

    @abstractmethod
    def get_or_create_active_chat(self, user_id: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    def create_message(self, chat_id: str, user_id: str, sender: str, content: str,
                       message_type: str = "text") -> Dict[str, Any]:
        pass

    @abstractmethod
    def get_chat_messages(self, chat_id: str) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def link_workout_to_chat(self, chat_id: str, workout_id: str) -> None:
        pass

    def save_turn(self, user_id: str, user_message: str, reply: str) -> str:
        chat = self.get_or_create_active_chat(user_id)
        self.create_message(chat["id"], user_id, SENDER_USER, user_message)
        self.create_message(chat["id"], user_id, SENDER_LOGAN, reply)
        return chat["id"]

    def record_generated_workout(self, user_id: str, workout: Workout) -> str:
        """생성된 운동을 사용자의 활성 대화에 연결하고 workout_generated 메시지를 남깁니다."""
        chat = self.get_or_create_active_chat(user_id)
        self.link_workout_to_chat(chat["id"], workout.id)
        self.create_message(
            chat["id"], user_id, SENDER_LOGAN,
            f"I've created \"{workout.name}\" for {workout.date} ({len(workout.exercises)} exercises).",
            message_type="workout_generated",
        )
        return chat["id"]
