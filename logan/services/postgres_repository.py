import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import psycopg2
import psycopg2.extras

from logan import config
from logan.models import Exercise, Workout, now_string
from logan.services.base_repository import (
    PROFILE_FIELDS,
    BaseChatRepository,
    BaseProfileRepository,
    BaseWorkoutRepository,
)


def get_db_connection():
    """PostgreSQL 데이터베이스 연결을 생성합니다."""
    return psycopg2.connect(config.DATABASE_URL)


@contextmanager
def db_cursor():
    """커밋/롤백과 연결 종료를 처리하는 RealDictCursor."""
    conn = get_db_connection()
    try:
        cursor = conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
        yield cursor
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def is_uuid(value: Any) -> bool:
    """workouts/chats 의 id 컬럼은 UUID. 그 외 형식(예: workout-<ms>)은 존재하지 않는 id 로 취급합니다."""
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return False
    return True


def _date_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def row_to_exercise(row: Dict[str, Any]) -> Exercise:
    return Exercise(
        id=str(row["id"]),
        name=row["name"],
        sets=row.get("sets") or 3,
        reps=row.get("reps") or 10,
        weight=float(row.get("weight_lbs") or 0),
        notes=row.get("notes") or "",
        rest_seconds=row.get("rest_seconds") or 60,
        completed=bool(row.get("completed")),
        actual_sets=row.get("actual_sets"),
        actual_reps=row.get("actual_reps"),
        actual_weight=float(row["actual_weight_lbs"]) if row.get("actual_weight_lbs") is not None else None,
    )


def row_to_workout(row: Dict[str, Any], exercise_rows: List[Dict[str, Any]]) -> Workout:
    ordered = sorted(exercise_rows, key=lambda r: r.get("order_in_workout") or 0)
    return Workout(
        id=str(row["id"]),
        name=row["name"],
        date=_date_str(row.get("scheduled_date")) or "",
        duration=row.get("duration_minutes") or 30,
        notes=row.get("ai_notes") or "",
        description=row.get("description") or "",
        exercises=[row_to_exercise(r) for r in ordered],
        status=row.get("status") or "proposed",
        completed=row.get("status") == "completed",
        started_at=_date_str(row.get("started_at")),
        completed_at=_date_str(row.get("completed_at")),
        user_id=str(row["user_id"]) if row.get("user_id") else None,
        chat_id=str(row["chat_id"]) if row.get("chat_id") else None,
    )


class PostgresWorkoutRepository(BaseWorkoutRepository):

    def _exercises_for(self, cursor, workout_ids: List[str]) -> Dict[str, List[Dict[str, Any]]]:
        grouped: Dict[str, List[Dict[str, Any]]] = {wid: [] for wid in workout_ids}
        if not workout_ids:
            return grouped
        cursor.execute(
            "SELECT * FROM exercises WHERE workout_id = ANY(%s::uuid[]) ORDER BY order_in_workout",
            (workout_ids,),
        )
        for row in cursor.fetchall():
            grouped.setdefault(str(row["workout_id"]), []).append(row)
        return grouped

    def list_workouts(self, user_id: Optional[str] = None) -> List[Workout]:
        with db_cursor() as cursor:
            if user_id:
                cursor.execute(
                    "SELECT * FROM workouts WHERE user_id = %s ORDER BY scheduled_date", (user_id,)
                )
            else:
                cursor.execute("SELECT * FROM workouts ORDER BY scheduled_date")
            rows = cursor.fetchall()
            exercises = self._exercises_for(cursor, [str(r["id"]) for r in rows])
        return [row_to_workout(r, exercises.get(str(r["id"]), [])) for r in rows]

    def get_workout(self, workout_id: str) -> Optional[Workout]:
        if not is_uuid(workout_id):
            return None
        with db_cursor() as cursor:
            cursor.execute("SELECT * FROM workouts WHERE id = %s", (workout_id,))
            row = cursor.fetchone()
            if row is None:
                return None
            exercises = self._exercises_for(cursor, [str(row["id"])])
        return row_to_workout(row, exercises.get(str(row["id"]), []))

    def _insert_exercises(self, cursor, workout_id: str, exercises: List[Exercise]) -> None:
        for index, ex in enumerate(exercises):
            cursor.execute(
                """
                INSERT INTO exercises (workout_id, name, sets, reps, weight_lbs, rest_seconds, notes,
                                       order_in_workout, completed, actual_sets, actual_reps, actual_weight_lbs)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (workout_id, ex.name, ex.sets, ex.reps, ex.weight, ex.rest_seconds or 60, ex.notes,
                 index + 1, ex.completed, ex.actual_sets, ex.actual_reps, ex.actual_weight),
            )

    def create_workout(self, workout: Workout, user_id: Optional[str] = None,
                       chat_id: Optional[str] = None) -> Workout:
        with db_cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO workouts (user_id, chat_id, name, description, scheduled_date,
                                      duration_minutes, ai_notes, status)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING id
                """,
                (user_id or workout.user_id, chat_id or workout.chat_id, workout.name, workout.description,
                 workout.date, workout.duration, workout.notes, workout.status),
            )
            workout_id = str(cursor.fetchone()["id"])
            self._insert_exercises(cursor, workout_id, workout.exercises)
        print(f"[PostgresWorkoutRepository] 운동 저장 완료: {workout_id}")
        return self.get_workout(workout_id)

    def update_workout(self, workout: Workout) -> Workout:
        if not is_uuid(workout.id):
            raise KeyError(workout.id)
        with db_cursor() as cursor:
            cursor.execute(
                """
                UPDATE workouts
                SET name = %s, description = %s, scheduled_date = %s, duration_minutes = %s,
                    ai_notes = %s, status = %s, started_at = %s, completed_at = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (workout.name, workout.description, workout.date, workout.duration, workout.notes,
                 workout.status, workout.started_at, workout.completed_at, workout.id),
            )
            if cursor.rowcount == 0:
                raise KeyError(workout.id)
            cursor.execute("DELETE FROM exercises WHERE workout_id = %s", (workout.id,))
            self._insert_exercises(cursor, workout.id, workout.exercises)
        return self.get_workout(workout.id)

    def delete_workout(self, workout_id: str) -> bool:
        if not is_uuid(workout_id):
            return False
        with db_cursor() as cursor:
            cursor.execute("DELETE FROM exercises WHERE workout_id = %s", (workout_id,))
            cursor.execute("DELETE FROM workouts WHERE id = %s", (workout_id,))
            return cursor.rowcount > 0

    def update_exercise_progress(self, workout_id: str, exercise_index: int, exercise: Exercise) -> None:
        if not is_uuid(workout_id):
            raise KeyError(workout_id)
        with db_cursor() as cursor:
            cursor.execute(
                """
                UPDATE exercises
                SET completed = %s, actual_sets = %s, actual_reps = %s, actual_weight_lbs = %s,
                    updated_at = NOW()
                WHERE workout_id = %s AND order_in_workout = %s
                """,
                (exercise.completed, exercise.actual_sets, exercise.actual_reps, exercise.actual_weight,
                 workout_id, exercise_index + 1),
            )


class PostgresProfileRepository(BaseProfileRepository):

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        with db_cursor() as cursor:
            cursor.execute("SELECT * FROM user_profiles WHERE user_id = %s", (user_id,))
            row = cursor.fetchone()
        return dict(row) if row else None

    def upsert_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        columns = [c for c in PROFILE_FIELDS if c in fields]
        if not columns:
            return self.get_profile(user_id) or {}
        values = [fields[c] for c in columns]
        assignments = ", ".join(f"{c} = EXCLUDED.{c}" for c in columns)
        placeholders = ", ".join(["%s"] * (len(columns) + 1))
        with db_cursor() as cursor:
            cursor.execute(
                f"""
                INSERT INTO user_profiles (user_id, {", ".join(columns)})
                VALUES ({placeholders})
                ON CONFLICT (user_id) DO UPDATE SET {assignments}, updated_at = NOW()
                RETURNING *
                """,
                [user_id] + values,
            )
            return dict(cursor.fetchone())

    def reset_profile(self, user_id: str) -> None:
        assignments = ", ".join(f"{c} = NULL" for c in PROFILE_FIELDS)
        with db_cursor() as cursor:
            cursor.execute(
                f"UPDATE user_profiles SET {assignments}, updated_at = NOW() WHERE user_id = %s",
                (user_id,),
            )


class PostgresChatRepository(BaseChatRepository):

    def get_or_create_active_chat(self, user_id: str) -> Dict[str, Any]:
        with db_cursor() as cursor:
            cursor.execute(
                """
                SELECT * FROM chats WHERE user_id = %s AND status = 'active'
                ORDER BY created_at DESC LIMIT 1
                """,
                (user_id,),
            )
            row = cursor.fetchone()
            if row is None:
                cursor.execute(
                    "INSERT INTO chats (user_id, title, status) VALUES (%s, %s, 'active') RETURNING *",
                    (user_id, "Workout Planning"),
                )
                row = cursor.fetchone()
        chat = dict(row)
        chat["id"] = str(chat["id"])
        return chat

    def create_message(self, chat_id: str, user_id: str, sender: str, content: str,
                       message_type: str = "text") -> Dict[str, Any]:
        with db_cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO messages (chat_id, user_id, sender, content, message_type)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING *
                """,
                (chat_id, user_id, sender, content, message_type),
            )
            return dict(cursor.fetchone())

    def get_chat_messages(self, chat_id: str) -> List[Dict[str, Any]]:
        with db_cursor() as cursor:
            cursor.execute(
                "SELECT * FROM messages WHERE chat_id = %s ORDER BY created_at ASC", (chat_id,)
            )
            return [dict(r) for r in cursor.fetchall()]

    def link_workout_to_chat(self, chat_id: str, workout_id: str) -> None:
        if not is_uuid(chat_id) or not is_uuid(workout_id):
            raise KeyError(workout_id)
        with db_cursor() as cursor:
            cursor.execute(
                "UPDATE chats SET workout_id = %s, updated_at = %s WHERE id = %s",
                (workout_id, now_string(), chat_id),
            )
