import json
import math
import re
import time
from typing import Any, Dict, List, Optional, Union

from logan.errors import (
    INVALID_FORMAT_MESSAGE,
    INVALID_PLAN_MESSAGE,
    INVALID_WORKOUT_MESSAGE,
    ParseError,
)
from logan.models import Exercise, PlanDay, WeeklyPlan, Workout, today_string

# LLM이 숫자 대신 "30 seconds", "10 reps" 처럼 쓰는 경우를 되돌립니다.
SECONDS_PATTERN = re.compile(r'"(\d+)\s*seconds?"', re.IGNORECASE)
REPS_PATTERN = re.compile(r'"(\d+)\s*reps?"', re.IGNORECASE)
LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
LEADING_FLOAT = re.compile(r"^\s*([+-]?\d+(?:\.\d+)?|[+-]?\.\d+)")

DEFAULT_SETS = 3
DEFAULT_REPS = 10
DEFAULT_DURATION = 30


def to_int(value: Any, default: int) -> int:
    """느슨한 정수 변환. 변환 실패 또는 1 미만이면 default."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return default
        number = int(value)
    else:
        match = LEADING_INT.match(str(value))
        if not match:
            return default
        number = int(match.group(1))
    return number if number >= 1 else default


def to_float(value: Any, default: float = 0.0) -> float:
    """느슨한 실수 변환. 변환 실패 또는 음수면 default."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = LEADING_FLOAT.match(str(value))
        if not match:
            return default
        number = float(match.group(1))
    if not math.isfinite(number) or number < 0:
        return default
    return number


def extract_json_block(raw_text: str) -> str:
    """처음 '{' 부터 마지막 '}' 까지만 잘라냅니다. 없으면 trim 된 원문."""
    text = (raw_text or "").strip()
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]
    return text


def repair_units(text: str) -> str:
    text = SECONDS_PATTERN.sub(r"\1", text)
    return REPS_PATTERN.sub(r"\1", text)


def load_json_with_repair(raw_text: str) -> Union[Any, ParseError]:
    cleaned = extract_json_block(raw_text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as first_error:
        print(f"🚨 JSON 파싱 오류: {first_error}. 단위 표기 보정 후 재시도합니다.")
        repaired = repair_units(cleaned)
        try:
            return json.loads(repaired)
        except json.JSONDecodeError as e:
            print(f"🚨 보정 후에도 JSON 파싱 실패: {e}")
            print(f"🚨 원본 응답: {raw_text}")
            return ParseError(
                kind="MalformedResponse",
                message=INVALID_FORMAT_MESSAGE,
                raw_text=raw_text or "",
                cleaned_text=repaired,
            )


def normalize_exercise(item: Any) -> Exercise:
    if not isinstance(item, dict):
        item = {}
    name = item.get("name")
    notes = item.get("notes")
    return Exercise(
        name=str(name) if name else "Unknown Exercise",
        sets=to_int(item.get("sets"), DEFAULT_SETS),
        reps=to_int(item.get("reps"), DEFAULT_REPS),
        weight=to_float(item.get("weight"), 0.0),
        notes=str(notes) if notes else "",
    )


def normalize_exercises(items: List[Any]) -> List[Exercise]:
    return [normalize_exercise(item) for item in items]


def _has_valid_name(data: Dict[str, Any]) -> bool:
    name = data.get("name")
    return isinstance(name, str) and bool(name.strip())


def parse_workout_response(raw_text: str, time_available: Any = None) -> Union[Workout, ParseError]:
    """
    LLM의 원문 응답을 검증된 Workout으로 변환합니다. 예외를 던지지 않습니다.

    Args:
        raw_text: LLM 응답 원문 (앞뒤 설명, 코드 펜스가 섞여 있을 수 있음)
        time_available: 요청한 운동 시간(분). duration 계산에 사용하고 없으면 30분.
    Returns:
        Workout 또는 ParseError(MalformedResponse | InvalidStructure)
    """
    data = load_json_with_repair(raw_text)
    if isinstance(data, ParseError):
        return data

    if not isinstance(data, dict) or not _has_valid_name(data) or not isinstance(data.get("exercises"), list):
        print(f"🚨 운동 구조 검증 실패: {data}")
        return ParseError(
            kind="InvalidStructure",
            message=INVALID_WORKOUT_MESSAGE,
            raw_text=raw_text or "",
            cleaned_text=extract_json_block(raw_text),
        )

    notes = data.get("notes")
    workout = Workout(
        id=str(data.get("id") or f"workout-{int(time.time() * 1000)}"),
        name=data["name"].strip(),
        date=str(data.get("date") or today_string()),
        duration=to_int(time_available, DEFAULT_DURATION),
        notes=str(notes) if notes else "",
        exercises=normalize_exercises(data["exercises"]),
        status="proposed",
        completed=False,
    )
    print(f"✅ 운동 파싱 완료: {workout.name} ({len(workout.exercises)}개 운동)")
    return workout


def _normalize_plan_day(index: int, entry: Any, time_available: Any) -> PlanDay:
    entry = entry if isinstance(entry, dict) else {}
    day = str(entry.get("day") or f"Day {index + 1}")
    focus = str(entry.get("focus") or "")
    workout_data = entry.get("workout") if isinstance(entry.get("workout"), dict) else {}
    exercises = workout_data.get("exercises") if isinstance(workout_data.get("exercises"), list) else []
    name = workout_data.get("name") if _has_valid_name(workout_data) else f"{day} Workout"
    notes = workout_data.get("notes")
    workout = Workout(
        name=name,
        date=today_string(),
        duration=to_int(time_available, DEFAULT_DURATION),
        notes=str(notes) if notes else "",
        exercises=normalize_exercises(exercises),
    )
    return PlanDay(day=day, focus=focus, workout=workout)


def parse_weekly_plan_response(raw_text: str, params: Optional[Dict[str, Any]] = None) -> Union[WeeklyPlan, ParseError]:
    """주간 계획 응답을 파싱합니다. 요청 빈도와 일수가 달라도 거절하지 않고 로그만 남깁니다."""
    params = params or {}
    data = load_json_with_repair(raw_text)
    if isinstance(data, ParseError):
        return data

    if not isinstance(data, dict) or not _has_valid_name(data) \
            or not isinstance(data.get("weeklyPlan"), list) or not data["weeklyPlan"]:
        print(f"🚨 주간 계획 구조 검증 실패: {data}")
        return ParseError(
            kind="InvalidStructure",
            message=INVALID_PLAN_MESSAGE,
            raw_text=raw_text or "",
            cleaned_text=extract_json_block(raw_text),
        )

    time_available = params.get("timeAvailable")
    days = [_normalize_plan_day(i, entry, time_available) for i, entry in enumerate(data["weeklyPlan"])]

    frequency = to_int(params.get("workoutFrequency"), 0)
    if frequency and frequency != len(days):
        print(f"⚠️ 요청한 운동 일수({frequency})와 생성된 일수({len(days)})가 다릅니다.")

    return WeeklyPlan(
        name=data["name"].strip(),
        description=str(data.get("description") or ""),
        notes=str(data.get("notes") or ""),
        weekly_plan=days,
        date=today_string(),
        fitness_level=str(params.get("fitnessLevel") or ""),
        goals=str(params.get("goals") or ""),
        workout_frequency=str(params.get("workoutFrequency") or ""),
        time_available=str(params.get("timeAvailable") or ""),
        equipment=str(params.get("equipment") or ""),
        focus_areas=str(params.get("focusAreas") or ""),
    )
