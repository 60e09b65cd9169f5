import threading
import uuid
from typing import Any, Dict, List, Optional

from logan.models import Exercise, Workout, now_string
from logan.services.base_repository import (
    PROFILE_FIELDS,
    BaseChatRepository,
    BaseProfileRepository,
    BaseWorkoutRepository,
)


class InMemoryWorkoutRepository(BaseWorkoutRepository):
    """DATABASE_URL 이 없을 때와 테스트에서 쓰는 프로세스 내 저장소."""

    def __init__(self):
        self._workouts: Dict[str, Workout] = {}
        self._lock = threading.Lock()

    def list_workouts(self, user_id: Optional[str] = None) -> List[Workout]:
        with self._lock:
            workouts = list(self._workouts.values())
        if user_id:
            workouts = [w for w in workouts if w.user_id == user_id]
        return sorted(workouts, key=lambda w: w.date)

    def get_workout(self, workout_id: str) -> Optional[Workout]:
        with self._lock:
            return self._workouts.get(workout_id)

    def create_workout(self, workout: Workout, user_id: Optional[str] = None,
                       chat_id: Optional[str] = None) -> Workout:
        stored = workout.model_copy(update={
            "id": workout.id or str(uuid.uuid4()),
            "user_id": user_id or workout.user_id,
            "chat_id": chat_id or workout.chat_id,
        })
        with self._lock:
            self._workouts[stored.id] = stored
        return stored

    def update_workout(self, workout: Workout) -> Workout:
        with self._lock:
            if workout.id not in self._workouts:
                raise KeyError(workout.id)
            self._workouts[workout.id] = workout
        return workout

    def delete_workout(self, workout_id: str) -> bool:
        with self._lock:
            return self._workouts.pop(workout_id, None) is not None

    def update_exercise_progress(self, workout_id: str, exercise_index: int, exercise: Exercise) -> None:
        with self._lock:
            workout = self._workouts.get(workout_id)
            if workout is None:
                raise KeyError(workout_id)
            exercises = list(workout.exercises)
            exercises[exercise_index] = exercise
            self._workouts[workout_id] = workout.model_copy(update={"exercises": exercises})


class InMemoryProfileRepository(BaseProfileRepository):

    def __init__(self):
        self._profiles: Dict[str, Dict[str, Any]] = {}

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        profile = self._profiles.get(user_id)
        return dict(profile) if profile else None

    def upsert_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        profile = self._profiles.setdefault(user_id, {"user_id": user_id, "created_at": now_string()})
        profile.update(fields)
        profile["updated_at"] = now_string()
        return dict(profile)

    def reset_profile(self, user_id: str) -> None:
        profile = self._profiles.get(user_id)
        if profile is None:
            return
        for field in PROFILE_FIELDS:
            profile[field] = None
        profile["updated_at"] = now_string()


class InMemoryChatRepository(BaseChatRepository):

    def __init__(self):
        self._chats: Dict[str, Dict[str, Any]] = {}
        self._messages: Dict[str, List[Dict[str, Any]]] = {}

    def get_or_create_active_chat(self, user_id: str) -> Dict[str, Any]:
        for chat in self._chats.values():
            if chat["user_id"] == user_id and chat["status"] == "active":
                return chat
        chat = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "title": "Workout Planning",
            "status": "active",
            "workout_id": None,
            "created_at": now_string(),
        }
        self._chats[chat["id"]] = chat
        self._messages[chat["id"]] = []
        return chat

    def create_message(self, chat_id: str, user_id: str, sender: str, content: str,
                       message_type: str = "text") -> Dict[str, Any]:
        message = {
            "id": str(uuid.uuid4()),
            "chat_id": chat_id,
            "user_id": user_id,
            "sender": sender,
            "content": content,
            "message_type": message_type,
            "created_at": now_string(),
        }
        self._messages.setdefault(chat_id, []).append(message)
        return message

    def get_chat_messages(self, chat_id: str) -> List[Dict[str, Any]]:
        return list(self._messages.get(chat_id, []))

    def link_workout_to_chat(self, chat_id: str, workout_id: str) -> None:
        chat = self._chats.get(chat_id)
        if chat is not None:
            chat["workout_id"] = workout_id
